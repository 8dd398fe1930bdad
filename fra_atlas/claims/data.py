"""
Claims dataset loading.

The atlas ships a small static set of forest-rights claims; a GeoJSON file
with the same property layout can be loaded in its place.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from ..exceptions import ConfigurationError, InvalidFormat
from ..utils.data_utils import feature_collection, is_feature_collection


logger = logging.getLogger(__name__)

# Properties every claim feature carries
CLAIM_PROPERTIES = [
    'claimId', 'featureType', 'claimantName', 'description', 'status',
    'dateFiled', 'state', 'district', 'village', 'tribalGroup', 'eligibleSchemes'
]


def _square(west: float, south: float, size: float = 0.45) -> Dict[str, Any]:
    east, north = west + size, south + size
    return {
        'type': 'Polygon',
        'coordinates': [[
            [west, south], [east, south], [east, north], [west, north], [west, south]
        ]]
    }


def _claim(geometry: Dict[str, Any], **properties) -> Dict[str, Any]:
    return {'type': 'Feature', 'properties': properties, 'geometry': geometry}


SAMPLE_CLAIMS: Dict[str, Any] = feature_collection([
    _claim(
        _square(77.675, 22.675),
        claimId='CLM001', featureType='IFR', claimantName='John Doe',
        description='Claim for individual forest land rights',
        status='Pending', dateFiled='2025-01-15',
        state='Madhya Pradesh', district='Bhopal', village='Village A',
        tribalGroup='Gond', eligibleSchemes=['PM-KISAN', 'Jal Jeevan Mission']
    ),
    _claim(
        _square(78.025, 17.025),
        claimId='CLM004', featureType='IFR', claimantName='Priya Patel',
        description='Individual claim for agricultural land rights',
        status='Under Review', dateFiled='2025-04-20',
        state='Telangana', district='Hyderabad', village='Village F',
        tribalGroup='Lambada', eligibleSchemes=['Jal Jeevan Mission', 'DAJGUA']
    ),
    _claim(
        _square(85.025, 20.025),
        claimId='CLM003', featureType='CR', claimantName='Rahul Sharma',
        description='Community rights over forest produce',
        status='Rejected', dateFiled='2025-03-05',
        state='Odisha', district='Bhubaneswar', village='Village E',
        tribalGroup='Santal', eligibleSchemes=[]
    ),
    _claim(
        _square(91.525, 23.525),
        claimId='CLM006', featureType='CR', claimantName='Sunita Devi',
        description='Community claim for access to forest resources',
        status='Pending', dateFiled='2025-06-01',
        state='Tripura', district='Dhalai', village='Village D',
        tribalGroup='Tripuri', eligibleSchemes=['PM-KISAN']
    ),
    _claim(
        _square(91.025, 23.525),
        claimId='CLM002', featureType='CFR', claimantName='Jane Smith',
        description='Community claim for forest resource management',
        status='Approved', dateFiled='2025-02-10',
        state='Tripura', district='Agartala', village='Village C',
        tribalGroup='Tripuri', eligibleSchemes=['PM-KISAN', 'MGNREGA']
    ),
    _claim(
        _square(75.675, 22.175),
        claimId='CLM005', featureType='CFR', claimantName='Amit Kumar',
        description='Community claim for forest conservation rights',
        status='Approved', dateFiled='2025-05-10',
        state='Madhya Pradesh', district='Indore', village='Village B',
        tribalGroup='Bhil', eligibleSchemes=['PM-KISAN', 'MGNREGA']
    ),
])


def sample_claims() -> List[Dict[str, Any]]:
    """Return a deep copy of the bundled claim features."""
    return copy.deepcopy(SAMPLE_CLAIMS['features'])


def load_claims(file_path: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Load claim features from a GeoJSON file, or the bundled sample.

    Args:
        file_path: Path to a GeoJSON FeatureCollection; the bundled sample
            is returned when omitted

    Returns:
        List of claim features

    Raises:
        ConfigurationError: If the file does not exist
        InvalidFormat: If the file is not a valid GeoJSON FeatureCollection
    """
    if not file_path:
        return sample_claims()

    path = Path(file_path)
    if not path.is_file():
        raise ConfigurationError(
            f"Claims file not found: {file_path}",
            config_key='claims_file',
            config_value=file_path
        )

    try:
        with path.open('r', encoding='utf-8') as handle:
            document = json.load(handle)
    except ValueError as e:
        raise InvalidFormat(
            f"Claims file is not valid JSON: {file_path}",
            region=file_path,
            original_error=e
        )

    if not is_feature_collection(document):
        raise InvalidFormat(
            f"Claims file is not a GeoJSON FeatureCollection: {file_path}",
            region=file_path,
            found_type=document.get('type') if isinstance(document, dict) else type(document).__name__
        )

    features = list(document.get('features') or [])
    missing = _missing_properties(features)
    if missing:
        logger.warning(f"Claims in {file_path} lack properties: {', '.join(missing)}")

    logger.info(f"Loaded {len(features)} claims from {file_path}")
    return features


def claims_frame(features: List[Dict[str, Any]]) -> pd.DataFrame:
    """
    Tabulate claim properties, one row per feature in input order.

    Columns missing from every feature are added as empty strings.
    """
    frame = pd.DataFrame([feature.get('properties') or {} for feature in features])
    for column in CLAIM_PROPERTIES:
        if column not in frame.columns:
            frame[column] = ''
    return frame


def _missing_properties(features: List[Dict[str, Any]]) -> List[str]:
    present = set()
    for feature in features:
        present.update((feature.get('properties') or {}).keys())
    return [name for name in CLAIM_PROPERTIES if name not in present]
