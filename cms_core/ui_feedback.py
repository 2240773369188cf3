"""
Notification helpers for the content console.
"""

import streamlit as st
from contextlib import contextmanager
import logging

logger = logging.getLogger(__name__)

_ICONS = {
    'success': '✅',
    'info': 'ℹ️',
    'warning': '⚠️',
    'error': '❌'
}


class Notify:
    """
    Toast notifications.

    Usage:
    Notify.success("Content saved")
    Notify.info("Changes discarded")
    """

    @staticmethod
    def _display_notification(message: str, notification_type: str = 'info') -> None:
        icon = _ICONS.get(notification_type, _ICONS['info'])
        logger.debug(f"Notify[{notification_type}]: {message}")
        st.toast(message, icon=icon)

    @staticmethod
    def success(message: str) -> None:
        Notify._display_notification(message, 'success')

    @staticmethod
    def info(message: str) -> None:
        Notify._display_notification(message, 'info')

    @staticmethod
    def warn(message: str) -> None:
        Notify._display_notification(message, 'warning')

    @staticmethod
    def error(message: str) -> None:
        Notify._display_notification(message, 'error')


@contextmanager
def spinner(message: str = "Loading..."):
    """Context manager for the spinner loading indicator."""
    with st.spinner(message):
        yield
