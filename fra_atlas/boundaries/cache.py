"""
In-memory cache of fetched boundary documents.
"""

import logging
from typing import Any, Dict, List, Optional


STATES_KEY = "states"


class BoundaryCache:
    """
    Maps ``"states"`` and state region keys to fetched boundary documents.

    Entries are written once and kept for the lifetime of the process; there
    is no eviction and no expiry.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._documents: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the cached document for ``key``, or None."""
        return self._documents.get(key)

    def put(self, key: str, document: Dict[str, Any]) -> None:
        """Store ``document`` under ``key`` unless the key is already filled."""
        if key in self._documents:
            self.logger.debug(f"Boundary cache already holds '{key}', keeping first document")
            return

        self._documents[key] = document
        self.logger.debug(
            f"Cached boundaries for '{key}' ({len(document.get('features', [])):,} features)"
        )

    def keys(self) -> List[str]:
        return list(self._documents)

    def __contains__(self, key: str) -> bool:
        return key in self._documents

    def __len__(self) -> int:
        return len(self._documents)
