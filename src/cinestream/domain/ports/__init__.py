from .fetcher import FetcherPort
from .identifier_store import IdentifierStorePort
from .source import SourcePort

__all__ = [
    "FetcherPort",
    "IdentifierStorePort",
    "SourcePort",
]
