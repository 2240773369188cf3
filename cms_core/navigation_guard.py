"""
Navigation guard for the content console.

One arbiter lives for the lifetime of the dashboard shell. The editor screen
that is currently mounted registers its dirty flag and save capability here,
and every navigation attempt (links and back buttons alike) goes through
request_navigation, so no transition away from unsaved work bypasses the
unsaved-changes prompt.
"""

import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, Union

logger = logging.getLogger(__name__)

SaveHandler = Callable[[], Union[Awaitable[Any], Any]]


class GuardChoice(str, Enum):
    """Operator answers to the unsaved-changes prompt."""

    SAVE_AND_EXIT = "save_and_exit"
    DISCARD_AND_EXIT = "discard_and_exit"
    KEEP_EDITING = "keep_editing"


CHOICE_LABELS = {
    GuardChoice.SAVE_AND_EXIT: "Save & Exit",
    GuardChoice.DISCARD_AND_EXIT: "Discard Changes",
    GuardChoice.KEEP_EDITING: "Keep Editing",
}


@dataclass
class GuardRegistration:
    dirty: bool = False
    save_handler: Optional[SaveHandler] = None
    owner: Any = None


@dataclass
class PendingNavigation:
    """A navigation attempt suspended until the operator answers the prompt."""

    destination: str
    choices: List[GuardChoice]


@dataclass
class NavigationOutcome:
    """Result of resolving the prompt."""

    choice: GuardChoice
    navigated: bool
    destination: Optional[str] = None
    error: Optional[str] = None


class NavigationGuard:
    """Single-slot arbiter between the live editor and every navigation attempt."""

    def __init__(self, navigate: Callable[[str], Any]):
        """
        Args:
            navigate: Performs the actual screen transition to a destination
        """
        self._navigate = navigate
        self._registration = GuardRegistration()
        self._pending: Optional[PendingNavigation] = None
        self.saving = False
        self.last_error: Optional[str] = None

    @property
    def dirty(self) -> bool:
        return self._registration.dirty

    @property
    def save_handler(self) -> Optional[SaveHandler]:
        return self._registration.save_handler

    @property
    def owner(self) -> Any:
        return self._registration.owner

    @property
    def pending(self) -> Optional[PendingNavigation]:
        return self._pending

    @property
    def is_prompt_open(self) -> bool:
        return self._pending is not None

    def register(self, dirty: bool, save_handler: Optional[SaveHandler] = None, owner: Any = None) -> None:
        """
        Replace the current registration.

        The last caller wins; only one editor is mounted at a time.
        """
        if owner is not None and self._registration.owner not in (None, owner):
            logger.debug("Navigation guard registration taken over by a new editor")
        self._registration = GuardRegistration(dirty=bool(dirty), save_handler=save_handler, owner=owner)

    def clear(self, owner: Any = None) -> bool:
        """
        Reset to {dirty: False, save_handler: None}.

        Args:
            owner: When given, only clear if this owner holds the registration

        Returns:
            True if the registration was cleared
        """
        if owner is not None and self._registration.owner is not owner:
            return False
        self._registration = GuardRegistration()
        self._pending = None
        return True

    def available_choices(self) -> List[GuardChoice]:
        """Choices offered by the prompt; Save & Exit needs a save handler."""
        choices = []
        if self._registration.save_handler is not None:
            choices.append(GuardChoice.SAVE_AND_EXIT)
        choices.extend([GuardChoice.DISCARD_AND_EXIT, GuardChoice.KEEP_EDITING])
        return choices

    def request_navigation(self, destination: str) -> bool:
        """
        Navigate, or suspend the attempt behind the unsaved-changes prompt.

        Args:
            destination: Route to go to

        Returns:
            True if navigation happened immediately, False if the prompt is now open
        """
        if not self._registration.dirty:
            self._go(destination)
            return True

        logger.info(f"Navigation to {destination} suspended: unsaved changes")
        self.last_error = None
        self._pending = PendingNavigation(destination=destination, choices=self.available_choices())
        return False

    async def resolve(self, choice: GuardChoice) -> NavigationOutcome:
        """
        Apply the operator's answer to the pending prompt.

        Args:
            choice: Operator's choice

        Returns:
            NavigationOutcome describing what happened
        """
        choice = GuardChoice(choice)
        pending = self._pending
        if pending is None:
            logger.warning(f"Prompt answer '{choice.value}' with no pending navigation")
            return NavigationOutcome(choice=choice, navigated=False)

        if choice == GuardChoice.KEEP_EDITING:
            self._pending = None
            return NavigationOutcome(choice=choice, navigated=False)

        if choice == GuardChoice.DISCARD_AND_EXIT:
            self._pending = None
            self._registration.dirty = False
            logger.info(f"Discarding unsaved changes, navigating to {pending.destination}")
            self._go(pending.destination)
            return NavigationOutcome(choice=choice, navigated=True, destination=pending.destination)

        if choice not in pending.choices or self._registration.save_handler is None:
            logger.warning("Save & Exit requested without a registered save handler")
            return NavigationOutcome(choice=choice, navigated=False, error="Saving is not available")

        if self.saving:
            return NavigationOutcome(choice=choice, navigated=False, error="Save already in progress")

        succeeded, error = await self._run_save_handler()
        self._pending = None

        if not succeeded:
            self.last_error = error or "Failed to save changes"
            logger.warning(f"Save & Exit failed, staying on screen: {self.last_error}")
            return NavigationOutcome(choice=choice, navigated=False, error=self.last_error)

        self._registration.dirty = False
        self.last_error = None
        self._go(pending.destination)
        return NavigationOutcome(choice=choice, navigated=True, destination=pending.destination)

    async def _run_save_handler(self):
        self.saving = True
        try:
            result = self._registration.save_handler()
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.error(f"Save handler raised: {e}", exc_info=True)
            return False, str(e)
        finally:
            self.saving = False

        if result is False:
            return False, None
        if hasattr(result, 'success'):
            return bool(result.success), getattr(result, 'message', None)
        return True, None

    def _go(self, destination: str) -> None:
        logger.debug(f"Navigating to {destination}")
        self._navigate(destination)
