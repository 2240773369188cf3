"""
Entity store adapter for the content console.
Fetches, creates, updates and deletes content items against the persistence API.
"""

from typing import Dict, Any, List, Optional
import logging

import httpx
from pydantic import ValidationError as PydanticValidationError

from .exceptions import NetworkError, NotFoundError, SchemaError, ValidationError
from .models import Collection, ContentItem, parse_collection, parse_item

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

# Keys the server assigns; never sent on create/update
SERVER_ASSIGNED_KEYS = ('id', 'createdAt', 'updatedAt', 'created_at', 'updated_at')


def _error_message(response: httpx.Response) -> str:
    """Extract a readable message from an error response body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"

    if isinstance(body, dict):
        message = body.get('message') or body.get('error') or body.get('detail')
        if isinstance(message, list):
            return "; ".join(str(m) for m in message)
        if message:
            return str(message)
    return f"HTTP {response.status_code}"


def _field_errors(response: httpx.Response) -> Dict[str, List[str]]:
    """Extract per-field errors when the server reports them as {'errors': {field: [...]}}."""
    try:
        body = response.json()
    except ValueError:
        return {}

    errors = body.get('errors') if isinstance(body, dict) else None
    if not isinstance(errors, dict):
        return {}

    result: Dict[str, List[str]] = {}
    for name, messages in errors.items():
        if isinstance(messages, list):
            result[str(name)] = [str(m) for m in messages]
        else:
            result[str(name)] = [str(messages)]
    return result


def strip_server_keys(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in payload.items() if k not in SERVER_ASSIGNED_KEYS}


class EntityStore:
    """
    REST adapter for collections and content items.

    Every call opens its own AsyncClient, so an EntityStore can be shared
    across event loops.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Args:
            base_url: API root, e.g. http://localhost:3001/api
            timeout: Request timeout in seconds
            token: Optional bearer token sent with every request
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._transport = transport
        self.rejected_collections: Dict[str, SchemaError] = {}
        self._headers = {'Accept': 'application/json'}
        if token:
            self._headers['Authorization'] = f"Bearer {token}"

    @classmethod
    def from_config(cls, config: Dict[str, Any], transport: Optional[httpx.AsyncBaseTransport] = None) -> "EntityStore":
        api = config.get('api', {})
        return cls(
            base_url=api.get('base_url', ''),
            timeout=float(api.get('timeout') or DEFAULT_TIMEOUT),
            token=api.get('token'),
            transport=transport
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=self._headers,
            transport=self._transport
        )

    async def _request(
        self,
        method: str,
        path: str,
        resource: str,
        identifier: Any = None,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Perform one request and map failures onto the error taxonomy.

        Raises:
            NotFoundError: On 404
            ValidationError: On any other 4xx
            NetworkError: On 5xx, transport failure or an unreadable body
        """
        logger.debug(f"{method} {path} params={params}")
        try:
            async with self._client() as client:
                response = await client.request(method, path, json=json, params=params)
        except httpx.TransportError as e:
            logger.error(f"Network error during {method} {path}: {e}")
            raise NetworkError(f"Could not reach the content service: {e}", original_error=e) from e

        status = response.status_code
        if status == 404:
            logger.info(f"{resource} not found: {identifier}")
            raise NotFoundError(resource, identifier if identifier is not None else path)
        if 400 <= status < 500:
            message = _error_message(response)
            logger.warning(f"{method} {path} rejected with {status}: {message}")
            raise ValidationError(message, field_errors=_field_errors(response), status_code=status)
        if status >= 500:
            logger.error(f"{method} {path} failed with {status}")
            raise NetworkError(f"Content service error (status: {status})", status_code=status)

        if status == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON in response to {method} {path}")
            raise NetworkError("Content service returned an invalid response", status_code=status,
                               original_error=e) from e

    def _to_item(self, raw: Any) -> ContentItem:
        try:
            return parse_item(raw)
        except (PydanticValidationError, TypeError) as e:
            logger.error(f"Malformed content item in response: {e}")
            raise NetworkError("Content service returned a malformed item", original_error=e) from e

    @staticmethod
    def _unwrap_list(body: Any) -> List[Any]:
        if isinstance(body, list):
            return body
        if isinstance(body, dict):
            for key in ('items', 'data'):
                if isinstance(body.get(key), list):
                    return body[key]
        if body is None:
            return []
        raise NetworkError("Content service returned an unexpected list payload")

    async def list_collections(self) -> List[Collection]:
        """
        Fetch every valid collection definition, in server order.

        Malformed definitions are left out and kept in rejected_collections,
        keyed by slug and id, so only screens that use them fail.
        """
        body = await self._request('GET', '/collections', 'Collection list')
        collections = []
        rejected: Dict[str, SchemaError] = {}
        skipped = 0
        for raw in self._unwrap_list(body):
            try:
                collections.append(parse_collection(raw))
            except SchemaError as e:
                refs = [raw.get(key) for key in ('slug', 'id')] if isinstance(raw, dict) else []
                logger.warning(f"Skipping malformed collection {refs}: {e}")
                skipped += 1
                for ref in refs:
                    if ref is not None:
                        rejected[str(ref)] = e
        self.rejected_collections = rejected
        logger.info(f"Fetched {len(collections)} collections ({skipped} skipped)")
        return collections

    async def get(self, item_id: str) -> ContentItem:
        """Fetch one content item."""
        body = await self._request('GET', f'/content-items/{item_id}', 'Content item', item_id)
        return self._to_item(body)

    async def list(self, collection_id: str) -> List[ContentItem]:
        """Fetch the items of a collection in server order. One request per call."""
        body = await self._request(
            'GET', '/content-items', 'Collection', collection_id,
            params={'collectionId': collection_id}
        )
        items = [self._to_item(raw) for raw in self._unwrap_list(body)]
        logger.info(f"Fetched {len(items)} items for collection {collection_id}")
        return items

    async def create(self, collection_id: str, payload: Dict[str, Any]) -> ContentItem:
        """
        Create a content item.

        Args:
            collection_id: Owning collection
            payload: Item fields; id and timestamps are dropped

        Returns:
            The stored item with server-assigned id and timestamps
        """
        body = strip_server_keys(payload)
        body['collectionId'] = collection_id
        result = await self._request('POST', '/content-items', 'Collection', collection_id, json=body)
        item = self._to_item(result)
        logger.info(f"Created content item {item.id} in collection {collection_id}")
        return item

    async def update(self, item_id: str, payload: Dict[str, Any]) -> ContentItem:
        """
        Update a content item.

        The payload is partial at the top level, but its data map is sent
        whole; keys missing from it are not treated as deletions here.
        """
        body = strip_server_keys(payload)
        result = await self._request('PATCH', f'/content-items/{item_id}', 'Content item', item_id, json=body)
        item = self._to_item(result)
        logger.info(f"Updated content item {item_id}")
        return item

    async def delete(self, item_id: str) -> bool:
        """Delete a content item."""
        await self._request('DELETE', f'/content-items/{item_id}', 'Content item', item_id)
        logger.info(f"Deleted content item {item_id}")
        return True
