"""
Visitor tracking service.

record_visit() keeps one Trackers row per client IP and counts hits per route.
The stats helpers back the admin tracker page.
"""

from collections import Counter
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.models.tracker import Trackers
from app.services.blocklist import BlockListStore
from app.services.geoip import lookup_geo
from app.utils.dates import utc_now

logger = get_logger(__name__)

TOP_ROUTES_LIMIT = 10


async def record_visit(
    db: AsyncSession,
    ip: str,
    route: str,
    user_agent: str | None,
) -> Trackers:
    """
    Record one request from an IP address.

    Creates the tracker row on the first visit; later visits bump the visit
    count and the per-route counter. Country and city are only set when the
    row is created, so the geo lookup only runs for new visitors.

    Caller is responsible for committing.
    """
    result = await db.execute(
        select(Trackers).where(Trackers.ip == ip)  # type: ignore[arg-type]
    )
    tracker = result.scalar_one_or_none()

    if tracker is None:
        geo = await lookup_geo(ip)
        tracker = Trackers(
            ip=ip,
            country=geo.country_name,
            city=geo.city_name,
            times_visited=1,
            routes={route: 1},
            user_agent=user_agent,
            is_first_visit=True,
        )
        db.add(tracker)
        logger.debug("tracker_new_visitor", ip=ip, route=route)
        return tracker

    tracker.times_visited += 1
    tracker.is_first_visit = False
    tracker.user_agent = user_agent
    tracker.last_seen = utc_now()
    # Reassign so the JSON column is marked dirty
    tracker.routes = {**tracker.routes, route: tracker.routes.get(route, 0) + 1}
    db.add(tracker)
    return tracker


async def get_tracker_stats(db: AsyncSession) -> dict[str, Any]:
    """
    Aggregate tracker statistics for the admin page.

    Returns:
        Dict with keys:
            - total_visits: sum of all route hits
            - unique_ips: number of tracked addresses
            - blocked_ips: number of blocked addresses
            - countries: list of {country, visits, unique_ips}, busiest first
            - top_routes: list of {route, hits}, at most TOP_ROUTES_LIMIT
    """
    unique_ips = (await db.execute(select(func.count()).select_from(Trackers))).scalar_one()

    country_rows = await db.execute(
        select(  # type: ignore[call-overload]
            Trackers.country,
            func.sum(Trackers.times_visited).label("visits"),
            func.count(Trackers.tracker_id).label("unique_ips"),
        )
        .group_by(Trackers.country)
        .order_by(func.sum(Trackers.times_visited).desc())
    )
    countries = [
        {"country": country, "visits": int(visits or 0), "unique_ips": ips}
        for country, visits, ips in country_rows.all()
    ]

    route_counts: Counter[str] = Counter()
    for routes in (await db.execute(select(Trackers.routes))).scalars():  # type: ignore[call-overload]
        route_counts.update(routes or {})

    return {
        "total_visits": sum(route_counts.values()),
        "unique_ips": unique_ips,
        "blocked_ips": await BlockListStore(db).count(),
        "countries": countries,
        "top_routes": [
            {"route": route, "hits": hits}
            for route, hits in route_counts.most_common(TOP_ROUTES_LIMIT)
        ],
    }


async def list_tracker_entries(
    db: AsyncSession, offset: int, limit: int
) -> tuple[list[Trackers], int]:
    """Tracker rows, most recent visit first, with the total row count."""
    total = (await db.execute(select(func.count()).select_from(Trackers))).scalar_one()
    result = await db.execute(
        select(Trackers)
        .order_by(Trackers.last_seen.desc(), Trackers.tracker_id.desc())  # type: ignore[attr-defined,union-attr]
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total
