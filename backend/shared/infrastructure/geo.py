"""
Country detection for incoming registrations.

Policy:
1. Trust the edge proxy header (cf-ipcountry by default) when it holds a
   real two-letter code.
2. Otherwise, for globally routable IPs only, ask the IP geolocation service
   under one overall deadline.
3. Anything else degrades to "unknown". Lookup failures are logged, never raised.
"""

import asyncio
import ipaddress
from collections.abc import Mapping

import httpx

from shared.config.constants import GEO_HEADER_SENTINELS, UNKNOWN_COUNTRY
from shared.config.logging import get_logger
from shared.config.settings import get_settings
from shared.utils.exceptions import ExternalLookupFailure

logger = get_logger(__name__)


def _is_country_code(value: str) -> bool:
    return len(value) == 2 and value.isascii() and value.isalpha()


def country_from_header(headers: Mapping[str, str], header_name: str) -> str | None:
    """Return the uppercased country from the trusted header, if usable."""
    wanted = header_name.lower()
    for name, value in headers.items():
        if name.lower() != wanted or not value:
            continue
        candidate = value.strip().upper()
        if candidate in GEO_HEADER_SENTINELS or not _is_country_code(candidate):
            return None
        return candidate
    return None


def is_public_ip(client_ip: str | None) -> bool:
    """True for globally routable addresses. Loopback, private and link-local are not."""
    if not client_ip:
        return False
    try:
        return ipaddress.ip_address(client_ip.strip()).is_global
    except ValueError:
        return False


class CountryResolver:
    """
    Resolve an ISO 3166-1 alpha-2 country code for a client.

    Usage:
        resolver = CountryResolver()
        country = await resolver.resolve("190.2.3.4", request.headers)

    Tests inject an httpx transport to avoid real network calls.
    """

    def __init__(
        self,
        lookup_url: str | None = None,
        timeout: float | None = None,
        trusted_header: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        s = get_settings()
        self.lookup_url = lookup_url or s.geo_lookup_url
        self.timeout = timeout if timeout is not None else s.geo_lookup_timeout
        self.trusted_header = trusted_header or s.geo_trusted_header
        self._transport = transport

    async def resolve(self, client_ip: str | None, headers: Mapping[str, str] | None = None) -> str:
        country = country_from_header(headers or {}, self.trusted_header)
        if country:
            return country

        if not is_public_ip(client_ip):
            return UNKNOWN_COUNTRY

        try:
            return await self._lookup(client_ip)
        except ExternalLookupFailure:
            return UNKNOWN_COUNTRY

    async def _lookup(self, client_ip: str) -> str:
        url = self.lookup_url.format(ip=client_ip)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await asyncio.wait_for(client.get(url), self.timeout)
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise ExternalLookupFailure("timeout", ip=client_ip, timeout=self.timeout) from e
        except httpx.HTTPError as e:
            raise ExternalLookupFailure(type(e).__name__, ip=client_ip) from e

        if response.status_code != 200:
            raise ExternalLookupFailure(f"status {response.status_code}", ip=client_ip)

        try:
            payload = response.json()
        except ValueError as e:
            raise ExternalLookupFailure("invalid payload", ip=client_ip) from e

        code = str(payload.get("countryCode") or "").upper() if isinstance(payload, dict) else ""

        if not _is_country_code(code):
            raise ExternalLookupFailure("missing countryCode", ip=client_ip)

        logger.debug("Country resolved by lookup", country=code)
        return code
