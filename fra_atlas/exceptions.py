"""
Custom exception classes for the FRA atlas application.

This module defines the exception classes raised while fetching boundary
documents, locating regions and managing map layers, along with helpers used
to decide how each error is surfaced to the user.
"""

from typing import Optional, List, Dict, Any


class AtlasError(Exception):
    """Base exception class for all FRA atlas errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        """
        Initialize the base atlas error.

        Args:
            message: Human-readable error message
            error_code: Optional error code for programmatic handling
            context: Optional context information about the error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'error_code': self.error_code,
            'context': self.context
        }


class NetworkFailure(AtlasError):
    """Exception raised when a boundary document cannot be retrieved."""

    def __init__(self, message: str, region: Optional[str] = None,
                 url: Optional[str] = None, original_error: Optional[Exception] = None,
                 error_code: str = 'NETWORK_FAILURE'):
        """
        Initialize network failure.

        Args:
            message: Human-readable error message
            region: Region whose boundaries were requested
            url: URL that was requested
            original_error: Original exception that caused this error
            error_code: Error code, overridden by subclasses
        """
        context = {
            'region': region,
            'url': url,
            'original_error': str(original_error) if original_error else None,
            'original_error_type': type(original_error).__name__ if original_error else None
        }
        super().__init__(message, error_code=error_code, context=context)
        self.region = region
        self.url = url
        self.original_error = original_error


class BoundaryNotFound(NetworkFailure):
    """Exception raised when the boundary host answers with a non-success status."""

    def __init__(self, message: str, region: Optional[str] = None,
                 url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message, region=region, url=url,
                         error_code='BOUNDARY_NOT_FOUND')
        self.context['status_code'] = status_code
        self.status_code = status_code


class InvalidFormat(AtlasError):
    """Exception raised when a fetched document is not a GeoJSON FeatureCollection."""

    def __init__(self, message: str, region: Optional[str] = None,
                 url: Optional[str] = None, found_type: Optional[str] = None,
                 original_error: Optional[Exception] = None):
        """
        Initialize invalid format error.

        Args:
            message: Human-readable error message
            region: Region whose document was malformed
            url: URL the document came from
            found_type: Value of the document's ``type`` field, if any
            original_error: Original parse error, if any
        """
        context = {
            'region': region,
            'url': url,
            'found_type': found_type,
            'original_error': str(original_error) if original_error else None
        }
        super().__init__(message, error_code='INVALID_FORMAT', context=context)
        self.region = region
        self.url = url
        self.found_type = found_type
        self.original_error = original_error


class RegionNotFound(AtlasError):
    """Exception raised when a region name cannot be located in a boundary document."""

    def __init__(self, message: str, region: str, parent: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        """
        Initialize region lookup error.

        Args:
            message: Human-readable error message
            region: Region name that was looked up
            parent: Enclosing region (e.g. the state of a district)
            suggestions: Close matches found in the document
        """
        context = {
            'region': region,
            'parent': parent,
            'suggestions': suggestions or []
        }
        super().__init__(message, error_code='REGION_NOT_FOUND', context=context)
        self.region = region
        self.parent = parent
        self.suggestions = suggestions or []


class LayerRemovalError(AtlasError):
    """Exception raised when detaching a layer that the viewport does not hold."""

    def __init__(self, message: str, layer_name: Optional[str] = None,
                 original_error: Optional[Exception] = None):
        context = {
            'layer_name': layer_name,
            'original_error': str(original_error) if original_error else None
        }
        super().__init__(message, error_code='LAYER_REMOVAL_ERROR', context=context)
        self.layer_name = layer_name
        self.original_error = original_error


class ConfigurationError(AtlasError):
    """Exception raised for configuration errors."""

    def __init__(self, message: str, config_key: Optional[str] = None,
                 config_value: Any = None, valid_values: Optional[List[Any]] = None):
        """
        Initialize configuration error.

        Args:
            message: Human-readable error message
            config_key: Configuration key that has invalid value
            config_value: Invalid configuration value
            valid_values: List of valid values for the configuration key
        """
        context = {
            'config_key': config_key,
            'config_value': str(config_value) if config_value is not None else None,
            'valid_values': [str(v) for v in valid_values] if valid_values else None
        }
        super().__init__(message, error_code='CONFIGURATION_ERROR', context=context)
        self.config_key = config_key
        self.config_value = config_value
        self.valid_values = valid_values or []


# Utility functions for exception handling

def create_region_not_found_error(region: str, parent: Optional[str] = None,
                                  suggestions: Optional[List[str]] = None) -> RegionNotFound:
    """
    Create a standardized region lookup error.

    Args:
        region: Region name that was looked up
        parent: Enclosing region, if any
        suggestions: Close matches to mention in the message

    Returns:
        RegionNotFound instance
    """
    if parent:
        message = f"Could not find '{region}' in the boundaries of {parent}"
    else:
        message = f"Could not find '{region}'"

    if suggestions:
        message += f". Did you mean: {', '.join(suggestions)}?"

    return RegionNotFound(
        message=message,
        region=region,
        parent=parent,
        suggestions=suggestions
    )


def is_user_actionable(error: Exception) -> bool:
    """
    Determine if an error should be shown to the user.

    Fetch failures and lookup misses name a region the user asked for and can
    be retried; layer bookkeeping errors cannot be acted on.

    Args:
        error: Exception to check

    Returns:
        True if the error is surfaced as a notification, False otherwise
    """
    return isinstance(error, (NetworkFailure, InvalidFormat, RegionNotFound))


def get_error_severity(error: Exception) -> str:
    """
    Get the severity level of an error.

    Args:
        error: Exception to evaluate

    Returns:
        Severity level string (low, medium, high, critical)
    """
    if isinstance(error, ConfigurationError):
        return 'critical'
    elif isinstance(error, (NetworkFailure, InvalidFormat)):
        return 'high'
    elif isinstance(error, RegionNotFound):
        return 'medium'
    elif isinstance(error, LayerRemovalError):
        return 'low'
    else:
        return 'medium'
