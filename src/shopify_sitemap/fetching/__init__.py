from shopify_sitemap.fetching.domain import DomainValidator, is_public_address, resolve_host
from shopify_sitemap.fetching.http_fetcher import (
    FetchError,
    Fetcher,
    FetchResult,
    HttpStatusError,
    InsecureSchemeError,
    InvalidUrlError,
    ResponseTooLargeError,
    SafeFetcher,
    TransportError,
    UnsafeDomainError,
    create_client,
)

__all__ = [
    "DomainValidator",
    "FetchError",
    "FetchResult",
    "Fetcher",
    "HttpStatusError",
    "InsecureSchemeError",
    "InvalidUrlError",
    "ResponseTooLargeError",
    "SafeFetcher",
    "TransportError",
    "UnsafeDomainError",
    "create_client",
    "is_public_address",
    "resolve_host",
]
