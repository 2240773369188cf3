"""
Custom exception classes for the content editor core.

This module provides the error taxonomy shared by the schema resolver,
the entity store adapter and the editor session. Every error carries a
message, a context dictionary and a list of recovery suggestions so the
host screens can render them uniformly.
"""

import logging
from typing import Optional, Dict, Any, List

logger = logging.getLogger(__name__)


class CMSError(Exception):
    """
    Base exception for content editor errors.

    Attributes:
        message: Error message
        context: Additional context information
        recovery_suggestions: List of suggested recovery actions
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None,
                 recovery_suggestions: Optional[List[str]] = None):
        self.message = message
        self.context = context or {}
        self.recovery_suggestions = recovery_suggestions or []
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def get_full_details(self) -> Dict[str, Any]:
        """Get complete error details including context and suggestions."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'context': self.context,
            'recovery_suggestions': self.recovery_suggestions
        }


class SchemaError(CMSError):
    """
    Raised when a collection schema is malformed or names an unknown field type.

    Fatal for session initialisation.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        self.field_name = field_name
        context = dict(context or {})
        if field_name is not None:
            context['field_name'] = field_name

        recovery_suggestions = [
            "Check the collection definition in the admin console",
            "Verify every field declares a supported type",
            "Ensure field names are unique and valid object keys"
        ]

        super().__init__(message, context, recovery_suggestions)


class NotFoundError(CMSError):
    """Raised when a collection or content item does not exist."""

    def __init__(self, resource: str, identifier: Any, message: Optional[str] = None):
        self.resource = resource
        self.identifier = identifier

        if message is None:
            message = f"{resource} not found: {identifier}"

        context = {
            'resource': resource,
            'identifier': str(identifier)
        }

        recovery_suggestions = [
            "Refresh the list to check whether it was deleted",
            "Verify the link or identifier is correct"
        ]

        super().__init__(message, context, recovery_suggestions)


class ValidationError(CMSError):
    """
    Raised when item data is rejected, either locally at save time or by the server.

    Attributes:
        field_errors: Mapping of field name to list of messages
    """

    def __init__(self, message: str, field_errors: Optional[Dict[str, List[str]]] = None,
                 status_code: Optional[int] = None):
        self.field_errors = field_errors or {}
        self.status_code = status_code

        context: Dict[str, Any] = {'fields': sorted(self.field_errors.keys())}
        if status_code is not None:
            context['status_code'] = status_code

        recovery_suggestions = [
            "Fill in every required field",
            "Check highlighted fields for invalid values"
        ]

        super().__init__(message, context, recovery_suggestions)

    @property
    def fields(self) -> List[str]:
        return list(self.field_errors.keys())


class NetworkError(CMSError):
    """Raised for transport failures and 5xx responses. Always retryable."""

    retryable = True

    def __init__(self, message: str, status_code: Optional[int] = None,
                 original_error: Optional[Exception] = None):
        self.status_code = status_code
        self.original_error = original_error

        context: Dict[str, Any] = {}
        if status_code is not None:
            context['status_code'] = status_code
        if original_error is not None:
            context['original_error_type'] = type(original_error).__name__
            context['original_error_message'] = str(original_error)

        recovery_suggestions = [
            "Check your network connection",
            "Retry the operation; your edits have been kept"
        ]

        super().__init__(message, context, recovery_suggestions)


class SaveError(CMSError):
    """Raised by EditorSession.save_or_raise when a save does not complete."""

    def __init__(self, cause: Exception, message: Optional[str] = None):
        self.cause = cause

        if message is None:
            message = f"Failed to save entry: {cause}"

        context = {
            'cause_type': type(cause).__name__,
            'cause_message': str(cause)
        }
        recovery_suggestions = list(getattr(cause, 'recovery_suggestions', []))

        super().__init__(message, context, recovery_suggestions)


def get_error_summary(error: Exception) -> Dict[str, Any]:
    """
    Build a display summary for any exception.

    Args:
        error: Exception raised by the core or a library

    Returns:
        Dictionary with error_type, message and recovery_suggestions
    """
    if isinstance(error, CMSError):
        return error.get_full_details()

    logger.debug(f"Summarising non-CMS error: {type(error).__name__}")
    return {
        'error_type': type(error).__name__,
        'message': str(error),
        'context': {},
        'recovery_suggestions': []
    }
