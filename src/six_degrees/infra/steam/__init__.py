"""Steam ストアフロント向け infra 層パッケージ。"""

from .client import (
    SteamClientError,
    SteamRequestError,
    SteamRetryConfig,
    SteamStoreClient,
    SteamStoreClientProtocol,
    build_steam_client,
)
from .dto import AppDetailsDTO, parse_app_details
from .extractors import AppCardExtractor, IdentifierExtractor, SectionHeadingExtractor

__all__ = [
    "AppCardExtractor",
    "AppDetailsDTO",
    "IdentifierExtractor",
    "SectionHeadingExtractor",
    "SteamClientError",
    "SteamRequestError",
    "SteamRetryConfig",
    "SteamStoreClient",
    "SteamStoreClientProtocol",
    "build_steam_client",
    "parse_app_details",
]
