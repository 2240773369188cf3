"""
Error handling utilities for the content console.
Maps core errors to user-friendly messages and recovery hints and renders them.
"""

import streamlit as st
import logging
import traceback
from typing import Any, Callable, List, Optional

from .exceptions import (
    CMSError,
    NetworkError,
    NotFoundError,
    SaveError,
    SchemaError,
    ValidationError,
    get_error_summary,
)

logger = logging.getLogger(__name__)


class ErrorType:
    """Error type constants."""
    SCHEMA = "schema"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    NETWORK = "network"
    SAVE = "save"
    SYSTEM = "system"


_MESSAGES = {
    ErrorType.SCHEMA: "📋 This collection's schema is invalid. Fix the collection definition and reload.",
    ErrorType.NOT_FOUND: "🔍 The requested content could not be found. It may have been deleted.",
    ErrorType.VALIDATION: "✅ Some fields need attention before this content can be saved.",
    ErrorType.NETWORK: "🌐 The content service could not be reached. Please try again.",
    ErrorType.SAVE: "💾 Your changes could not be saved. They are still in the form.",
    ErrorType.SYSTEM: "💻 An unexpected error occurred. Please try again or contact support.",
}


class ErrorHandler:
    """Error handling for the content console."""

    @staticmethod
    def classify(error: Exception) -> str:
        """Map an exception to an ErrorType constant."""
        if isinstance(error, SaveError):
            return ErrorHandler.classify(error.cause) if isinstance(error.cause, CMSError) else ErrorType.SAVE
        if isinstance(error, SchemaError):
            return ErrorType.SCHEMA
        if isinstance(error, NotFoundError):
            return ErrorType.NOT_FOUND
        if isinstance(error, ValidationError):
            return ErrorType.VALIDATION
        if isinstance(error, NetworkError):
            return ErrorType.NETWORK
        return ErrorType.SYSTEM

    @staticmethod
    def get_user_friendly_message(error: Exception) -> str:
        return _MESSAGES[ErrorHandler.classify(error)]

    @staticmethod
    def get_recovery_suggestions(error: Exception) -> List[str]:
        if isinstance(error, SaveError) and isinstance(error.cause, CMSError):
            return list(error.cause.recovery_suggestions)
        if isinstance(error, CMSError):
            return list(error.recovery_suggestions)
        return ["Reload the page", "Contact support if the problem persists"]

    @staticmethod
    def handle_error(
        error: Exception,
        context: str,
        user_message: Optional[str] = None,
        show_details: bool = False
    ) -> None:
        """
        Log an error and show it to the operator.

        Args:
            error: The exception that occurred
            context: Where the error occurred
            user_message: Custom user-friendly message
            show_details: Whether to expand technical details
        """
        logger.error(f"Error in {context}: {error}", exc_info=True,
                     extra={'error_details': get_error_summary(error)})

        message = user_message or ErrorHandler.get_user_friendly_message(error)
        ErrorHandler._display_error(message, error, context, show_details)

    @staticmethod
    def _display_error(message: str, error: Exception, context: str, show_details: bool = False) -> None:
        st.error(message)

        suggestions = ErrorHandler.get_recovery_suggestions(error)
        if suggestions:
            st.markdown("**Suggested actions:**")
            for suggestion in suggestions:
                st.markdown(f"- {suggestion}")

        field_errors = getattr(error, 'field_errors', None)
        if field_errors:
            for field_name, messages in field_errors.items():
                for text in messages:
                    st.caption(f"{field_name}: {text}")

        if show_details:
            with st.expander("🔍 Technical Details"):
                st.write(f"**Error Type:** {type(error).__name__}")
                st.write(f"**Context:** {context}")
                st.write(f"**Error Message:** {error}")
                st.code(''.join(traceback.format_exception(type(error), error, error.__traceback__)))

    @staticmethod
    def with_error_handling(
        func: Callable,
        context: str,
        user_message: Optional[str] = None,
        default_return: Any = None
    ) -> Any:
        """
        Run func, rendering any error instead of raising it.

        Returns:
            Function result or default_return on error
        """
        try:
            return func()
        except Exception as e:
            ErrorHandler.handle_error(e, context, user_message)
            return default_return

