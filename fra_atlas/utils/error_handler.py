"""
Error handling utilities for the FRA atlas application.

This module routes errors raised during map interactions: fetch failures and
lookup misses are surfaced to the user through a notifier, while layer
bookkeeping failures are logged and swallowed so that later state transitions
are never blocked.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from ..exceptions import (
    AtlasError, LayerRemovalError, is_user_actionable, get_error_severity
)


Notifier = Callable[[AtlasError], None]


class ErrorHandler:
    """Centralized error logging and user notification."""

    def __init__(self, logger: Optional[logging.Logger] = None,
                 notifier: Optional[Notifier] = None):
        """
        Initialize the error handler.

        Args:
            logger: Optional logger instance for error logging
            notifier: Callable shown every user-actionable error; the error
                is only logged when omitted
        """
        self.logger = logger or logging.getLogger(__name__)
        self.notifier = notifier
        self.error_counts: Dict[str, int] = {}
        self.notifications: List[AtlasError] = []

    def handle_error(self, error: Exception, context: Dict[str, Any]) -> None:
        """
        Log an error and notify the user when they can act on it.

        Errors that are neither user-actionable nor LayerRemovalError are
        re-raised after logging.

        Args:
            error: Exception that occurred
            context: Context information about the error
        """
        self._log_error(error, context)

        error_type = type(error).__name__
        self.error_counts[error_type] = self.error_counts.get(error_type, 0) + 1

        if is_user_actionable(error):
            self.notifications.append(error)
            if self.notifier is not None:
                self.notifier(error)
            return

        if isinstance(error, LayerRemovalError):
            return

        raise error

    def _log_error(self, error: Exception, context: Dict[str, Any]):
        """Log error with appropriate level and context."""
        severity = get_error_severity(error)
        error_info = {
            'error_type': type(error).__name__,
            'message': str(error),
            'severity': severity,
            'context': context
        }

        if hasattr(error, 'to_dict'):
            error_info.update(error.to_dict())

        if severity == 'critical':
            self.logger.critical(f"Critical error: {error_info}")
        elif severity == 'high':
            self.logger.error(f"High severity error: {error_info}")
        elif severity == 'medium':
            self.logger.warning(f"Medium severity error: {error_info}")
        else:
            self.logger.info(f"Low severity error: {error_info}")

    def safe_remove_layer(self, viewport, layer) -> bool:
        """
        Detach ``layer`` from ``viewport``, swallowing removal failures.

        Returns:
            True if the layer was detached, False if removal failed
        """
        try:
            viewport.remove_layer(layer)
            return True
        except LayerRemovalError as e:
            self.handle_error(e, create_error_context('remove_layer', layer=getattr(layer, 'name', None)))
            return False

    @property
    def last_notification(self) -> Optional[AtlasError]:
        return self.notifications[-1] if self.notifications else None

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of errors handled so far."""
        return {
            'total_errors': sum(self.error_counts.values()),
            'error_counts': dict(self.error_counts),
            'notifications': len(self.notifications)
        }


def create_error_context(operation: str, **details) -> Dict[str, Any]:
    """
    Create standardized error context information.

    Args:
        operation: Name of the operation that failed
        **details: Additional context details

    Returns:
        Error context dictionary
    """
    context = {'operation': operation}
    context.update({key: value for key, value in details.items() if value is not None})
    return context
