"""
Geo/IP lookup service.

Resolves an IP address to country and city names through an HTTP lookup
endpoint (ip-api.com compatible JSON). The result is informational only:
it appears in notification emails and tracker rows and never affects
moderation.
"""

from dataclasses import dataclass

import httpx

from app.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class GeoInfo:
    ip: str
    country_name: str = UNKNOWN
    city_name: str = UNKNOWN


async def lookup_geo(ip: str) -> GeoInfo:
    """
    Look up country and city for an IP address.

    Never raises: when lookups are disabled, the address is missing, or the
    endpoint fails, both names are "UNKNOWN".

    Args:
        ip: Client IP address

    Returns:
        GeoInfo for the address
    """
    if not settings.GEOIP_ENABLED or not ip:
        return GeoInfo(ip=ip)

    url = settings.GEOIP_LOOKUP_URL.format(ip=ip)
    try:
        async with httpx.AsyncClient(timeout=settings.GEOIP_TIMEOUT_SECONDS) as client:
            response = await client.get(url)
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("geoip_lookup_failed", ip=ip, error=str(e))
        return GeoInfo(ip=ip)

    if data.get("status", "success") != "success":
        logger.debug("geoip_lookup_no_result", ip=ip, message=data.get("message"))
        return GeoInfo(ip=ip)

    return GeoInfo(
        ip=ip,
        country_name=data.get("country") or UNKNOWN,
        city_name=data.get("city") or UNKNOWN,
    )
