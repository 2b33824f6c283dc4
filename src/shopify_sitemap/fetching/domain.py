"""Hostname validation guarding every outbound request."""

from __future__ import annotations

import ipaddress
import re
import socket
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    Resolver = Callable[[str], Sequence[str]]

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_HOSTNAME_RE = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9.-]*[a-zA-Z0-9]$")
_SHOPIFY_SUFFIX = "myshopify.com"
_SHOPIFY_HOST_RE = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9-]*\.myshopify\.com$", re.IGNORECASE)
_TLD_RE = re.compile(r"^[a-zA-Z]{2,}$")


def resolve_host(hostname: str) -> list[str]:
    """Return every address ``hostname`` resolves to, or an empty list."""
    try:
        infos = socket.getaddrinfo(hostname, 443, proto=socket.IPPROTO_TCP)
    except (socket.gaierror, UnicodeError):
        return []
    return [str(sockaddr[0]) for _, _, _, _, sockaddr in infos]


def is_public_address(address: str) -> bool:
    try:
        ip = ipaddress.ip_address(address.split("%", 1)[0])
    except ValueError:
        return False
    return not (
        ip.is_private
        or ip.is_loopback
        or ip.is_reserved
        or ip.is_link_local
        or ip.is_multicast
        or ip.is_unspecified
    )


def _is_ip_literal(hostname: str) -> bool:
    try:
        ipaddress.ip_address(hostname)
    except ValueError:
        return False
    return True


def _mentions_shopify(hostname: str) -> bool:
    labels = hostname.lower().split(".")
    return any(".".join(labels[i : i + 2]) == _SHOPIFY_SUFFIX for i in range(len(labels) - 1))


class DomainValidator:
    """Decide whether a configured host is safe to fetch from.

    ``*.myshopify.com`` hosts are accepted on shape alone. Any other host is a
    custom domain and must resolve exclusively to public addresses.
    """

    def __init__(self, resolver: Resolver = resolve_host) -> None:
        self._resolver = resolver

    def validate(self, hostname: object) -> bool:
        if not isinstance(hostname, str) or not hostname:
            return False

        host = _SCHEME_RE.sub("", hostname.strip()).rstrip("/")
        if not _HOSTNAME_RE.match(host):
            return False
        if _is_ip_literal(host):
            return False

        if _mentions_shopify(host):
            return bool(_SHOPIFY_HOST_RE.match(host))

        return self._is_public_custom_domain(host)

    def _is_public_custom_domain(self, host: str) -> bool:
        labels = host.split(".")
        if len(labels) < 2 or not _TLD_RE.match(labels[-1]):
            return False

        addresses = self._resolver(host)
        if not addresses:
            return False
        return all(is_public_address(address) for address in addresses)
