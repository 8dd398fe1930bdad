"""
Administrative boundary components.
"""

from .cache import BoundaryCache, STATES_KEY
from .fetcher import BoundaryFetcher
from .layers import BoundaryLayer
from .manager import BoundaryLayerManager

__all__ = ['BoundaryCache', 'STATES_KEY', 'BoundaryFetcher', 'BoundaryLayer', 'BoundaryLayerManager']
