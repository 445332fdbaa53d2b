"""Domain layer - pure lookup rules with no infrastructure dependencies.

This layer contains:
- Value Objects: immutable provider descriptions (``Provider``)
- Domain logic: path parsing and hostname validation
- Domain errors: the user-visible failure kinds and their HTTP mapping
"""

from favicons_proxy.domain.model import (
    PROVIDERS,
    FaviconError,
    FaviconNotFound,
    InvalidDomain,
    MissingDomain,
    Provider,
    build_sources,
    extract_domain,
    is_valid_domain,
    parse_domain,
    request_path,
)


__all__ = [
    "PROVIDERS",
    "FaviconError",
    "FaviconNotFound",
    "InvalidDomain",
    "MissingDomain",
    "Provider",
    "build_sources",
    "extract_domain",
    "is_valid_domain",
    "parse_domain",
    "request_path",
]
