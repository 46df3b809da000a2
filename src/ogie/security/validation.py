"""
URL guard for ogie.

Every URL ogie is about to request, the original one and each redirect
target, passes through :func:`validate_url` first. URLs are parsed with
yarl, the parser aiohttp itself uses, so the host that is classified is the
IDNA-normalized host the request will actually go to. Private network
detection is lexical: literal hostnames and IP literals are checked, DNS is
never consulted, so a public name that resolves to a private address is not
caught.
"""

from __future__ import annotations

import ipaddress
import re
import socket
from typing import List, Optional

from pydantic import BaseModel, Field
from yarl import URL

from ogie.errors import InvalidUrlError

INVALID_URL_MESSAGE = "Invalid URL: must be a valid HTTP or HTTPS URL"
PRIVATE_URL_MESSAGE = "URL points to a private/internal network address"

_LEGACY_IPV4 = re.compile(r"^(0x[0-9a-f]+|\d+)(\.(0x[0-9a-f]+|\d+)){0,3}$", re.IGNORECASE)


class URLGuardRules(BaseModel):
    """Rules for URL validation."""

    allowed_schemes: List[str] = Field(default=["http", "https"])
    blocked_hostnames: List[str] = Field(default_factory=lambda: ["localhost"])
    blocked_suffixes: List[str] = Field(default_factory=lambda: [".localhost", ".local", ".internal"])
    max_url_length: int = 8192


class URLGuard:
    """
    Scheme and network-target validation for outbound requests.

    Rejects anything that is not an absolute http(s) URL with a host and,
    unless private targets are explicitly allowed, loopback, link-local,
    RFC 1918, unspecified addresses and ``localhost``/``.local``/``.internal``
    names. Hosts are judged after normalization, so full-width digits or
    ideographic dots cannot disguise a loopback address.
    """

    def __init__(self, rules: Optional[URLGuardRules] = None):
        self.rules = rules or URLGuardRules()

    def parse(self, url: str) -> Optional[URL]:
        """Normalized URL for an absolute http/https URL with a host, else None."""
        if not isinstance(url, str) or not url.strip():
            return None
        if len(url) > self.rules.max_url_length:
            return None
        try:
            parsed = URL(url.strip())
            # Accessing .port validates it
            parsed.port
            host = parsed.raw_host
        except (ValueError, TypeError):
            return None
        if parsed.scheme.lower() not in self.rules.allowed_schemes or not host:
            return None
        return parsed

    def is_valid_url(self, url: str) -> bool:
        """True for an absolute http/https URL with a hostname."""
        return self.parse(url) is not None

    def is_private_url(self, url: str) -> bool:
        """True when the URL's normalized host is a private, loopback or internal target."""
        parsed = self.parse(url)
        if parsed is None:
            return False
        return self.is_private_host(parsed.raw_host)

    def is_private_host(self, hostname: str) -> bool:
        host = hostname.lower().rstrip(".")
        if host in self.rules.blocked_hostnames:
            return True
        if any(host.endswith(suffix) for suffix in self.rules.blocked_suffixes):
            return True

        address = self._parse_ip(host)
        if address is None:
            return False
        if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
            address = address.ipv4_mapped
        return (
            address.is_private
            or address.is_loopback
            or address.is_link_local
            or address.is_unspecified
            or address.is_reserved
        )

    def validate_url(self, url: str, allow_private_urls: bool = False) -> str:
        """
        Validate an outbound URL.

        Returns:
            The normalized URL to request

        Raises:
            InvalidUrlError: If the URL is malformed, not http(s), or private
        """
        parsed = self.parse(url)
        if parsed is None:
            raise InvalidUrlError(INVALID_URL_MESSAGE, url)
        if not allow_private_urls and self.is_private_host(parsed.raw_host):
            raise InvalidUrlError(PRIVATE_URL_MESSAGE, url)
        return str(parsed)

    @staticmethod
    def _parse_ip(host: str) -> Optional[ipaddress.IPv4Address | ipaddress.IPv6Address]:
        try:
            return ipaddress.ip_address(host.strip("[]"))
        except ValueError:
            pass
        # Shorthand, decimal and hex IPv4 forms such as 127.1 or 2130706433
        if _LEGACY_IPV4.match(host):
            try:
                return ipaddress.IPv4Address(socket.inet_aton(host))
            except OSError:
                return None
        return None


# Convenience functions
_default_guard = URLGuard()


def validate_url(url: str, allow_private_urls: bool = False) -> str:
    """Validate a URL using the default guard and return its normalized form."""
    return _default_guard.validate_url(url, allow_private_urls=allow_private_urls)


def is_valid_url(url: str) -> bool:
    return _default_guard.is_valid_url(url)


def is_private_url(url: str) -> bool:
    return _default_guard.is_private_url(url)
