from __future__ import annotations
import os
from typing import Any, Dict, Mapping, Optional, Union
import requests
from .base_client import BaseClient
from .exceptions import ValidationError

DEFAULT_BASE_URL = 'https://api.sortly.co/api/v1'

ItemId = Union[int, str]


def _data(result: Any) -> Optional[Any]:
    # Single-object endpoints wrap the entity in {"data": {...}}; GET 404 yields {}.
    if not isinstance(result, dict) or not result.get('data'):
        return None
    return result['data']


def _require_id(value: Any, action: str) -> None:
    if value is None or value == '' or value == 0:
        raise ValidationError(f'Unable to {action}. Missing "id" property.')


class SortlyConnector(BaseClient):
    """Sortly inventory API connector (items, folders, custom fields, search).

    See API documentation at https://sortlyapi.docs.apiary.io/
    """
    BASE_URL = DEFAULT_BASE_URL
    USER_AGENT = 'sortly-connector-python/1.0'

    def __init__(self, api_token: str, base_url: Optional[str] = None, timeout: float = 30,
                 session: Optional[requests.Session] = None):
        super().__init__(base_url=base_url, timeout=timeout, session=session)
        self._api_token = api_token

    @classmethod
    def from_env(cls, session: Optional[requests.Session] = None) -> 'SortlyConnector':
        api_token = BaseClient.env('SORTLY_API_TOKEN')
        base_url = os.getenv('SORTLY_BASE_URL') or DEFAULT_BASE_URL
        raw_timeout = os.getenv('SORTLY_TIMEOUT') or '30'
        try:
            timeout = float(raw_timeout)
        except ValueError as e:
            raise ValidationError(f"Invalid SORTLY_TIMEOUT value: {raw_timeout!r}") from e
        return cls(api_token, base_url=base_url, timeout=timeout, session=session)  # type: ignore[arg-type]

    @property
    def api_token(self) -> str:
        return self._api_token

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        headers['Authorization'] = f"Bearer {self._api_token}"
        return headers

    # Items

    def create_item(self, item: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """Create an item (or folder, with ``type='folder'``) and return its data.

        Tags are submitted as ``tags: [{"name": "Tag1"}, ...]`` even though
        reads return them as ``tag_names``.
        """
        if not item:
            raise ValidationError('Unable to create item. Data is missing.')
        if not isinstance(item, Mapping):
            raise ValidationError('Unable to create item. Data must be a mapping.')
        if not item.get('name'):
            raise ValidationError('Unable to create item. Missing "name" property.')
        result = self._request('POST', 'items', json_body=dict(item))
        return _data(result)

    def fetch_item(self, item_id: ItemId, include: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Fetch one item, or None when it does not exist.

        ``include`` side-loads related data, e.g. ``'custom_attributes,photos'``.
        """
        _require_id(item_id, 'fetch item')
        result = self._request('GET', f'items/{item_id}', params={'include': include})
        return _data(result)

    def list_items(self, folder_id: Optional[ItemId] = None, per_page: Optional[int] = None,
                   page: Optional[int] = None, include: Optional[str] = None) -> Dict[str, Any]:
        params = {'folder_id': folder_id, 'per_page': per_page, 'page': page, 'include': include}
        return self._request('GET', 'items', params=params)

    def list_recent_items(self, per_page: Optional[int] = None, page: Optional[int] = None,
                          include: Optional[str] = None, updated_since: Optional[str] = None) -> Dict[str, Any]:
        params = {'per_page': per_page, 'page': page, 'include': include, 'updated_since': updated_since}
        return self._request('GET', 'items/recent', params=params)

    def update_item(self, item: Mapping[str, Any]) -> None:
        """Update an item in place. The API returns no data on success."""
        if not item:
            raise ValidationError('Unable to update item. Data is missing.')
        if not isinstance(item, Mapping):
            raise ValidationError('Unable to update item. Data must be a mapping.')
        _require_id(item.get('id'), 'update item')
        self._request('PUT', f"items/{item['id']}", json_body=dict(item))

    def delete_item(self, item_id: ItemId) -> None:
        _require_id(item_id, 'delete item')
        self._request('DELETE', f'items/{item_id}')

    def move_item(self, item_id: ItemId, quantity: int, folder_id: Optional[ItemId] = None,
                  leave_zero_quantity: Optional[bool] = None) -> Optional[Dict[str, Any]]:
        """Move ``quantity`` of an item to ``folder_id`` (root when omitted).

        Moving to a folder that does not exist has no effect on the API side.
        """
        _require_id(item_id, 'move item')
        if quantity is None:
            raise ValidationError('Unable to move item. Missing "quantity" property.')
        payload: Dict[str, Any] = {'quantity': quantity}
        if folder_id:
            payload['folder_id'] = folder_id
        if leave_zero_quantity is not None:
            payload['leave_zero_quantity'] = leave_zero_quantity
        result = self._request('POST', f'items/{item_id}/move', json_body=payload)
        return _data(result)

    def search_items(self, search: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Search items; returns ``{"meta": {...}, "data": [...]}``.

        Accepted keys include ``name``, ``type`` (all|item|folder),
        ``folder_ids``, ``sort``, ``per_page``, ``page`` and ``include``.
        """
        return self._request('POST', 'items/search', json_body=dict(search or {}))

    # Custom fields

    def list_custom_fields(self, per_page: Optional[int] = None, page: Optional[int] = None) -> Dict[str, Any]:
        return self._request('GET', 'custom_fields', params={'per_page': per_page, 'page': page})

    list_custom_attributes = list_custom_fields

    def fetch_custom_field(self, field_id: ItemId) -> Optional[Dict[str, Any]]:
        _require_id(field_id, 'fetch custom field')
        result = self._request('GET', f'custom_fields/{field_id}')
        return _data(result)
