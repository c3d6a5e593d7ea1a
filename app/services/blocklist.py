"""
IP block list backed by the blocked_ips table.

The table behaves as a set: the unique constraint on ``ip`` guarantees an
address is stored at most once, so concurrent adds of the same address
leave exactly one row.
"""

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.models.blocked_ip import BlockedIPs

logger = get_logger(__name__)


class BlockListStore:
    """Set operations over blocked IP addresses for one database session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, ip: str, reason: str | None = None) -> bool:
        """
        Add an address to the block list.

        The insert runs in a savepoint so a duplicate only rolls back this
        insert, not the caller's pending work.

        Returns:
            True if the address was newly added, False if it was already blocked
        """
        try:
            async with self.db.begin_nested():
                self.db.add(BlockedIPs(ip=ip, reason=reason))
        except IntegrityError:
            logger.debug("ip_already_blocked", ip=ip)
            return False

        logger.info("ip_blocked", ip=ip, reason=reason)
        return True

    async def remove(self, ip: str) -> bool:
        """
        Remove an address from the block list.

        Returns:
            True if a row was deleted, False if the address was not blocked
        """
        result = await self.db.execute(
            delete(BlockedIPs).where(BlockedIPs.ip == ip)  # type: ignore[arg-type]
        )
        removed = (result.rowcount or 0) > 0  # type: ignore[attr-defined]
        if removed:
            logger.info("ip_unblocked", ip=ip)
        return removed

    async def contains(self, ip: str) -> bool:
        result = await self.db.execute(
            select(BlockedIPs.blocked_ip_id).where(BlockedIPs.ip == ip)  # type: ignore[call-overload,arg-type]
        )
        return result.first() is not None

    async def list(self) -> list[BlockedIPs]:
        """All blocked addresses, most recently blocked first."""
        result = await self.db.execute(
            select(BlockedIPs).order_by(
                BlockedIPs.created_at.desc(),  # type: ignore[attr-defined]
                BlockedIPs.blocked_ip_id.desc(),  # type: ignore[union-attr]
            )
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(BlockedIPs))
        return result.scalar_one()
