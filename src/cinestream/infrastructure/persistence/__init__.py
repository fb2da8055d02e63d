from __future__ import annotations

from .identifier_store import InMemoryIdentifierStore, make_identifier
from .sweeper import IdentifierSweeper

__all__ = ["IdentifierSweeper", "InMemoryIdentifierStore", "make_identifier"]
