"""
Editor session for a single content item.

An EditorSession owns the working copy of one item, compares it against an
immutable snapshot to decide whether there is unsaved work, builds save
payloads and keeps the navigation guard informed. States:

    LOADING -> READY(CREATE | UPDATE) -> SAVING -> READY
    LOADING -> MISSING   (item fetch returned 404)
    any     -> CLOSED    (screen dismissed)
"""

import copy
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .diff_utils import calculate_diff, changed_top_level_fields
from .exceptions import CMSError, NotFoundError, SaveError, ValidationError
from .field_types import is_media_type
from .model_builder import validate_item_data
from .models import Collection, ContentItem, WorkingCopy
from .routes import NEW_ITEM_ID
from .schema_resolver import build_default_data, find_title_field, resolve_collection

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")
_SLUG_STRIP_RE = re.compile(r"[^A-Za-z0-9_-]")


class SessionState(str, Enum):
    LOADING = "loading"
    READY = "ready"
    SAVING = "saving"
    MISSING = "missing"
    CLOSED = "closed"


class EditorMode(str, Enum):
    CREATE = "create"
    UPDATE = "update"


@dataclass
class SaveResult:
    """
    Outcome of EditorSession.save.

    Attributes:
        success: The store accepted the payload
        item: Item returned by the store on success
        error: Error that stopped the save
        skipped: Save was not attempted (already saving, or session not editable)
        discarded: Response arrived after the session was closed and was dropped
    """

    success: bool
    item: Optional[ContentItem] = None
    error: Optional[Exception] = None
    skipped: bool = False
    discarded: bool = False
    field_errors: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def message(self) -> Optional[str]:
        if self.error is not None:
            return str(self.error)
        if self.skipped:
            return "Save already in progress"
        return None


def derive_slug(text: Any) -> str:
    """
    Turn a title into a URL slug.

    Lowercases, collapses whitespace runs into one hyphen and drops every
    character outside [A-Za-z0-9_-].

    Args:
        text: Title value

    Returns:
        Slug, possibly empty
    """
    if text is None:
        return ""
    slug = str(text).lower()
    slug = _WHITESPACE_RE.sub("-", slug)
    return _SLUG_STRIP_RE.sub("", slug)


class EditorSession:
    """State machine for editing one item of a collection."""

    def __init__(
        self,
        store,
        collection: Collection,
        guard=None,
        config: Optional[Dict[str, Any]] = None,
        media_picker=None
    ):
        """
        Args:
            store: Entity store adapter
            collection: Resolved collection definition
            guard: Optional NavigationGuard to keep informed
            config: Application configuration (editor section is used)
            media_picker: Optional MediaPicker for image and file fields
        """
        editor_config = (config or {}).get('editor', {}) or {}

        self.store = store
        self.collection = collection
        self.guard = guard
        self.media_picker = media_picker
        self.default_published = bool(editor_config.get('default_published', True))
        self.title_field = find_title_field(collection, editor_config.get('title_fields'))

        self.state = SessionState.LOADING
        self.mode = EditorMode.CREATE
        self.item_id: Optional[str] = None
        self.working = WorkingCopy()
        self.snapshot = WorkingCopy()
        self.slug_manually_edited = False
        self.last_error: Optional[str] = None
        self.field_errors: Dict[str, List[str]] = {}

    @classmethod
    async def open(
        cls,
        store,
        collection_ref: Union[Collection, str],
        item_id: Optional[str] = None,
        guard=None,
        config: Optional[Dict[str, Any]] = None,
        media_picker=None
    ) -> "EditorSession":
        """
        Resolve the collection and load the session.

        Args:
            store: Entity store adapter
            collection_ref: Collection or its slug/id
            item_id: Item to edit; None or "new" opens a CREATE session
            guard: Optional NavigationGuard
            config: Application configuration
            media_picker: Optional MediaPicker

        Returns:
            Session in READY or MISSING state

        Raises:
            NotFoundError: If the collection does not exist
            SchemaError: If the collection is malformed
            NetworkError, ValidationError: If loading the item fails otherwise
        """
        if isinstance(collection_ref, Collection):
            collection = collection_ref
        else:
            collection = await resolve_collection(store, collection_ref)

        session = cls(store, collection, guard=guard, config=config, media_picker=media_picker)
        await session.load(item_id)
        return session

    async def load(self, item_id: Optional[str] = None) -> None:
        """
        Initialise the working copy and snapshot.

        A 404 on the item moves the session to MISSING instead of raising.
        """
        defaults = build_default_data(self.collection)

        if item_id is None or item_id == NEW_ITEM_ID:
            self.mode = EditorMode.CREATE
            self.item_id = None
            self.working = WorkingCopy(data=defaults, is_published=self.default_published, slug="")
            self.snapshot = self.working.copy()
            self.state = SessionState.READY
            logger.info(f"Editor ready: new {self.collection.slug} entry")
            self._sync_guard()
            return

        try:
            item = await self.store.get(item_id)
        except NotFoundError:
            if self.state == SessionState.CLOSED:
                return
            logger.info(f"Item {item_id} not found; session reports missing")
            self.state = SessionState.MISSING
            self.item_id = item_id
            return

        if self.state == SessionState.CLOSED:
            logger.debug(f"Discarding load of {item_id}: session closed")
            return

        if item.collection_id != self.collection.id:
            logger.warning(f"Item {item_id} belongs to collection {item.collection_id}, "
                           f"not {self.collection.id}")

        self.mode = EditorMode.UPDATE
        self.item_id = item.id
        self.working = WorkingCopy.from_item(item, defaults)
        self.snapshot = self.working.copy()
        self.state = SessionState.READY
        logger.info(f"Editor ready: {self.collection.slug}/{item.id}")
        self._sync_guard()

    @property
    def is_dirty(self) -> bool:
        if self.state in (SessionState.LOADING, SessionState.MISSING, SessionState.CLOSED):
            return False
        return bool(calculate_diff(self.snapshot.to_dict(), self.working.to_dict()))

    @property
    def is_missing(self) -> bool:
        return self.state == SessionState.MISSING

    @property
    def is_saving(self) -> bool:
        return self.state == SessionState.SAVING

    @property
    def is_new(self) -> bool:
        return self.mode == EditorMode.CREATE

    def changed_fields(self) -> List[str]:
        """Names of data fields (plus isPublished/slug) that differ from the snapshot."""
        return changed_top_level_fields(self.snapshot.to_dict(), self.working.to_dict())

    def _ensure_editable(self) -> None:
        if self.state not in (SessionState.READY, SessionState.SAVING):
            raise RuntimeError(f"Editor session is not editable in state '{self.state.value}'")

    def get_field(self, name: str) -> Any:
        return self.working.data.get(name)

    def set_field(self, name: str, value: Any) -> None:
        """
        Replace one key of the working data, leaving every other key untouched.

        While the session is new and the slug has not been typed by hand, a
        change to the title field recomputes the slug.
        """
        self._ensure_editable()
        self.working.data[name] = value
        self.field_errors.pop(name, None)

        if (name == self.title_field
                and self.mode == EditorMode.CREATE
                and not self.slug_manually_edited):
            self.working.slug = derive_slug(value)

        self._sync_guard()

    def set_slug(self, value: str) -> None:
        """Set the slug by hand; stops automatic derivation for this session."""
        self._ensure_editable()
        self.slug_manually_edited = True
        self.working.slug = value or ""
        self._sync_guard()

    def set_published(self, is_published: bool) -> None:
        self._ensure_editable()
        self.working.is_published = bool(is_published)
        self._sync_guard()

    def revert_field(self, name: str) -> None:
        """Restore one data key to its snapshot value."""
        self._ensure_editable()
        if name in self.snapshot.data:
            self.working.data[name] = copy.deepcopy(self.snapshot.data[name])
        else:
            self.working.data.pop(name, None)
        self.field_errors.pop(name, None)
        self._sync_guard()

    def reset(self) -> None:
        """Throw away every unsaved edit."""
        self._ensure_editable()
        self.working = self.snapshot.copy()
        self.field_errors = {}
        self.last_error = None
        self._sync_guard()

    def resolve_slug(self, source: Optional[WorkingCopy] = None) -> str:
        """Slug to send: the typed or derived slug, else one derived from the title field."""
        source = source or self.working
        slug = (source.slug or "").strip()
        if not slug and self.title_field:
            slug = derive_slug(source.data.get(self.title_field))
        return slug

    def build_payload(self, source: Optional[WorkingCopy] = None) -> Dict[str, Any]:
        """
        Build the create/update body.

        The full data map is sent, orphaned keys included. The slug key is
        omitted when no slug can be derived so the server assigns one.
        """
        source = source or self.working
        payload = {
            'collectionId': self.collection.id,
            'data': copy.deepcopy(source.data),
            'isPublished': source.is_published,
        }
        slug = self.resolve_slug(source)
        if slug:
            payload['slug'] = slug
        return payload

    def validate(self) -> Dict[str, List[str]]:
        """Run save-time validation and remember the field errors."""
        self.field_errors = validate_item_data(self.working.data, self.collection)
        return self.field_errors

    async def save(self) -> SaveResult:
        """
        Persist the working copy.

        Never raises for store or validation failures; the error is returned
        and kept in last_error, and the working copy is left as it was.

        Returns:
            SaveResult
        """
        if self.state == SessionState.SAVING:
            logger.warning("Save ignored: a save is already in progress")
            return SaveResult(success=False, skipped=True)
        if self.state != SessionState.READY:
            logger.warning(f"Save ignored in state '{self.state.value}'")
            return SaveResult(success=False, skipped=True)

        field_errors = self.validate()
        if field_errors:
            error = ValidationError("Please fix the highlighted fields before saving",
                                    field_errors=field_errors)
            self.last_error = str(error)
            logger.info(f"Save blocked by validation: {sorted(field_errors)}")
            self._sync_guard()
            return SaveResult(success=False, error=error, field_errors=field_errors)

        sent = self.working.copy()
        payload = self.build_payload(sent)
        dispatched_mode = self.mode
        self.state = SessionState.SAVING
        self.last_error = None

        try:
            if dispatched_mode == EditorMode.CREATE:
                item = await self.store.create(self.collection.id, payload)
            else:
                item = await self.store.update(self.item_id, payload)
        except CMSError as e:
            if self.state == SessionState.CLOSED:
                logger.debug(f"Discarding failed save response: session closed ({e})")
                return SaveResult(success=False, error=e, discarded=True)
            self.state = SessionState.READY
            self.last_error = str(e)
            if isinstance(e, ValidationError):
                self.field_errors = dict(e.field_errors)
            logger.warning(f"Save failed for {self.collection.slug}: {e}")
            self._sync_guard()
            return SaveResult(success=False, error=e, field_errors=dict(self.field_errors))
        except Exception:
            if self.state != SessionState.CLOSED:
                self.state = SessionState.READY
            raise

        if self.state == SessionState.CLOSED:
            logger.info(f"Save of {item.id} completed after the editor closed; response discarded")
            return SaveResult(success=True, item=item, discarded=True)

        if item.slug:
            if self.working.slug == sent.slug:
                self.working.slug = item.slug
            sent.slug = item.slug

        self.snapshot = sent
        if dispatched_mode == EditorMode.CREATE:
            self.mode = EditorMode.UPDATE
            self.item_id = item.id
        self.state = SessionState.READY
        self.field_errors = {}
        logger.info(f"Saved {self.collection.slug}/{item.id} ({dispatched_mode.value})")
        self._sync_guard()
        return SaveResult(success=True, item=item)

    async def save_or_raise(self) -> ContentItem:
        """
        Persist the working copy, raising on failure.

        Raises:
            SaveError: Wrapping the validation or store error
        """
        result = await self.save()
        if not result.success:
            cause = result.error or RuntimeError(result.message or "Save was not performed")
            raise SaveError(cause)
        return result.item

    async def open_media_picker(self, field_name: str) -> Optional[str]:
        """
        Ask the media collaborator for a URL and store it in the field.

        Returns:
            The picked URL, or None if the operator cancelled
        """
        definition = self.collection.get_field(field_name)
        if definition is None or not is_media_type(definition.type):
            raise ValueError(f"Field '{field_name}' is not an image or file field")
        if self.media_picker is None:
            logger.warning("No media picker configured")
            return None

        url = await self.media_picker.pick(field_name, definition.type)
        if url is None or self.state not in (SessionState.READY, SessionState.SAVING):
            return None

        self.set_field(field_name, url)
        return url

    def close(self) -> None:
        """Dismiss the session; late responses are dropped and the guard is released."""
        if self.state == SessionState.CLOSED:
            return
        self.state = SessionState.CLOSED
        if self.guard is not None:
            self.guard.clear(owner=self)
        logger.debug(f"Editor session closed for {self.collection.slug}/{self.item_id or NEW_ITEM_ID}")

    def _sync_guard(self) -> None:
        if self.guard is None or self.state in (SessionState.CLOSED, SessionState.LOADING):
            return
        save_handler = self.save if self.state != SessionState.MISSING else None
        self.guard.register(self.is_dirty, save_handler, owner=self)
