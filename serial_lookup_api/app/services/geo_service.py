"""
IP geolocation for access-log rows.

``GeoResolver`` asks an ip-api.com style endpoint for the country and
city of a client address.  The result only decorates the access log,
so every failure (network error, timeout, HTTP error, a response whose
``status`` is not ``success``, an undecodable body) degrades to
``Unknown``/``Unknown``.  Local addresses never leave the process.
"""

from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from serial_lookup_api.app.core.errors import GeoLookupError


logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"


@dataclass(frozen=True)
class GeoLocation:
    country: str = UNKNOWN
    city: str = UNKNOWN


def is_local_address(ip: Optional[str]) -> bool:
    """Return ``True`` for addresses a public geolocation service cannot place."""
    if not ip or ip.strip().lower() == "localhost":
        return True
    try:
        address = ipaddress.ip_address(ip.strip())
    except ValueError:
        return False
    mapped = getattr(address, "ipv4_mapped", None)
    if mapped is not None:
        address = mapped
    return address.is_loopback or address.is_private or address.is_link_local or address.is_unspecified


class GeoResolver:
    """Resolve client IP addresses to ``GeoLocation`` values."""

    def __init__(
        self,
        *,
        url_template: str = "http://ip-api.com/json/{ip}",
        timeout: float = 10,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url_template = url_template
        self.timeout = timeout
        self.session = session or requests.Session()

    def _lookup(self, ip: str) -> Dict[str, Any]:
        url = self.url_template.format(ip=ip)
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise GeoLookupError(f"Geolocation request for {ip} failed: {exc}") from exc
        if not isinstance(data, dict) or data.get("status") != "success":
            message = data.get("message") if isinstance(data, dict) else None
            raise GeoLookupError(f"Geolocation for {ip} unavailable: {message or 'no success status'}")
        return data

    def resolve(self, ip: Optional[str]) -> GeoLocation:
        if is_local_address(ip):
            return GeoLocation()
        try:
            data = self._lookup(ip.strip())
        except GeoLookupError as exc:
            logger.warning("%s", exc)
            return GeoLocation()
        except Exception:
            logger.warning("Unexpected geolocation failure for %s", ip, exc_info=True)
            return GeoLocation()
        return GeoLocation(
            country=data.get("country") or UNKNOWN,
            city=data.get("city") or UNKNOWN,
        )
