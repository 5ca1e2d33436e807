"""
Tests for country detection.
"""

import asyncio

import httpx
import pytest

from shared.config.constants import UNKNOWN_COUNTRY
from shared.infrastructure.geo import CountryResolver, country_from_header, is_public_ip


def _resolver(handler) -> CountryResolver:
    return CountryResolver(
        lookup_url="https://geo.test/json/{ip}",
        timeout=0.5,
        trusted_header="cf-ipcountry",
        transport=httpx.MockTransport(handler),
    )


def _never_called(request):
    raise AssertionError(f"unexpected lookup: {request.url}")


class TestHeader:

    def test_case_insensitive_name(self):
        assert country_from_header({"CF-IPCountry": "ar"}, "cf-ipcountry") == "AR"

    @pytest.mark.parametrize("value", ["XX", "T1", "unknown", "ARG", "", "1A"])
    def test_unusable_values(self, value):
        assert country_from_header({"cf-ipcountry": value}, "cf-ipcountry") is None

    def test_missing_header(self):
        assert country_from_header({"x-forwarded-for": "1.1.1.1"}, "cf-ipcountry") is None


class TestPublicIp:

    @pytest.mark.parametrize("ip", ["8.8.8.8", "2001:4860:4860::8888"])
    def test_global(self, ip):
        assert is_public_ip(ip)

    @pytest.mark.parametrize("ip", [None, "", "127.0.0.1", "10.0.0.5", "192.168.1.10", "169.254.1.1", "::1", "no-es-ip"])
    def test_not_global(self, ip):
        assert not is_public_ip(ip)


class TestCountryResolver:

    @pytest.mark.asyncio
    async def test_header_wins(self):
        country = await _resolver(_never_called).resolve("8.8.8.8", {"CF-IPCountry": "UY"})
        assert country == "UY"

    @pytest.mark.asyncio
    async def test_sentinel_falls_through_to_lookup(self):
        def handler(request):
            assert request.url.path == "/json/8.8.8.8"
            return httpx.Response(200, json={"countryCode": "AR"})

        country = await _resolver(handler).resolve("8.8.8.8", {"cf-ipcountry": "XX"})
        assert country == "AR"

    @pytest.mark.asyncio
    async def test_private_ip_skips_lookup(self):
        assert await _resolver(_never_called).resolve("192.168.0.7", {}) == UNKNOWN_COUNTRY

    @pytest.mark.asyncio
    async def test_timeout_degrades(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        assert await _resolver(handler).resolve("8.8.8.8") == UNKNOWN_COUNTRY

    @pytest.mark.asyncio
    async def test_slow_server_hits_overall_deadline(self):
        async def handler(request):
            await asyncio.sleep(5)
            return httpx.Response(200, json={"countryCode": "AR"})

        resolver = _resolver(handler)
        resolver.timeout = 0.05

        assert await resolver.resolve("8.8.8.8") == UNKNOWN_COUNTRY

    @pytest.mark.asyncio
    async def test_connection_error_degrades(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        assert await _resolver(handler).resolve("8.8.8.8") == UNKNOWN_COUNTRY

    @pytest.mark.asyncio
    async def test_error_status_degrades(self):
        assert await _resolver(lambda r: httpx.Response(503)).resolve("8.8.8.8") == UNKNOWN_COUNTRY

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [b"not json", b"[]", b'{"status": "fail"}', b'{"countryCode": "ARG"}'])
    async def test_bad_payload_degrades(self, body):
        resolver = _resolver(lambda r: httpx.Response(200, content=body))
        assert await resolver.resolve("8.8.8.8") == UNKNOWN_COUNTRY
