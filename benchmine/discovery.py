#!/usr/bin/env python3

"""
Strategies for locating the declaration of a symbol that is not indexed yet.

After ``discover`` returns, the key is either indexed or recorded as ignored.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from benchmine.symbols import SymbolKey

if TYPE_CHECKING:
    from benchmine.workspace import Workspace

logger = logging.getLogger(__name__)


class Discovery(Protocol):
    def discover(self, ws: "Workspace", key: SymbolKey) -> None: ...


class CacheDiscovery:
    """Consume candidate files front to back, indexing each one completely."""

    def discover(self, ws: "Workspace", key: SymbolKey) -> None:
        while key not in ws.decls and ws.candidates:
            candidate = ws.candidates.popleft()
            logger.debug(f"Indexing {candidate} while looking for {key}")
            ws.index_file(candidate)

        if key not in ws.decls:
            ws.ignore(key)


class ExactSearchDiscovery:
    """Search every remaining candidate for this key only, leaving the queue intact."""

    def discover(self, ws: "Workspace", key: SymbolKey) -> None:
        if key in ws.decls:
            return

        for candidate in list(ws.candidates):
            ws.index_file(candidate, search_key=key)
            if key in ws.decls:
                logger.debug(f"Found {key} in {candidate}")
                return

        ws.ignore(key)


class DiscoveryPolicy(Enum):
    CACHE = "cache"
    EXACT = "exact"

    @classmethod
    def from_cache_flag(cls, cache: bool) -> "DiscoveryPolicy":
        return cls.CACHE if cache else cls.EXACT

    def strategy(self) -> Discovery:
        if self == DiscoveryPolicy.CACHE:
            return CacheDiscovery()
        return ExactSearchDiscovery()
