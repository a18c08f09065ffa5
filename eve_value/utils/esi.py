"""EVE market endpoints and identifiers used across the package."""

from __future__ import annotations

from typing import Final

TYPE_PLEX: Final[int] = 44992
# PLEX trades on a dedicated cross-region market since 2023.
GLOBAL_PLEX_REGION: Final[int] = 19000001
THE_FORGE_REGION: Final[int] = 10000002

ESI_PRICES_URL: Final[str] = "https://esi.evetech.net/latest/markets/prices/"
ESI_ORDERS_URL: Final[str] = "https://esi.evetech.net/latest/markets/{region_id}/orders/"
ESI_DATASOURCE: Final[str] = "tranquility"
FUZZWORK_AGGREGATES_URL: Final[str] = "https://market.fuzzwork.co.uk/aggregates/"

PAGES_HEADER: Final[str] = "X-Pages"

# One billion ISK is the usual denomination for comparing cash value.
DEFAULT_BLOCK_SIZE: Final[float] = 1_000_000_000.0
DEFAULT_EPSILON: Final[float] = 1e-9


__all__ = [
    "DEFAULT_BLOCK_SIZE",
    "DEFAULT_EPSILON",
    "ESI_DATASOURCE",
    "ESI_ORDERS_URL",
    "ESI_PRICES_URL",
    "FUZZWORK_AGGREGATES_URL",
    "GLOBAL_PLEX_REGION",
    "PAGES_HEADER",
    "THE_FORGE_REGION",
    "TYPE_PLEX",
]
