"""
Claim filtering.

Filters are combined by logical AND over the non-empty FilterState fields.
"""

from typing import Any, Dict, List

import pandas as pd

from ..models import FilterState
from .data import claims_frame


# FilterState field -> claim property matched by case-insensitive substring
TEXT_FILTERS = {
    'state': 'state',
    'district': 'district',
    'village': 'village',
    'tribal_group': 'tribalGroup',
}


def _text_column(frame: pd.DataFrame, column: str) -> pd.Series:
    return frame[column].fillna('').astype(str)


def filter_mask(frame: pd.DataFrame, filters: FilterState) -> pd.Series:
    """
    Build the boolean row mask selecting the claims that pass ``filters``.

    Args:
        frame: Claim properties as returned by ``claims_frame``
        filters: Active claim filters

    Returns:
        Boolean Series aligned with ``frame``
    """
    mask = pd.Series(True, index=frame.index)

    for field_name, column in TEXT_FILTERS.items():
        value = getattr(filters, field_name)
        if value:
            mask &= _text_column(frame, column).str.contains(value, case=False, regex=False)

    if filters.claim_statuses:
        mask &= _text_column(frame, 'status').isin(filters.claim_statuses)

    if filters.feature_type:
        mask &= _text_column(frame, 'featureType') == filters.feature_type

    return mask


def filter_claims(claims: List[Dict[str, Any]], filters: FilterState) -> List[Dict[str, Any]]:
    """
    Select the claims matching every non-empty filter field.

    The input is not modified and the relative order of claims is kept, so
    filtering an already filtered list with the same filters returns it
    unchanged.

    Args:
        claims: Claim features
        filters: Active claim filters

    Returns:
        Matching claim features
    """
    if not claims or filters.is_empty():
        return list(claims)

    mask = filter_mask(claims_frame(claims), filters)
    return [claim for claim, keep in zip(claims, mask.tolist()) if keep]
