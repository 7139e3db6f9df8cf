"""
Network-first data access with a local-store fallback.

Every service operation tries the REST API and, when that fails, performs the
equivalent read or write against the JSON array its ``storage_key`` names in
the :class:`~storefront.storage.LocalStore`. There is no retry and no
sync-back once the API returns.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, ClassVar, Dict, List, Optional, Type, TypeVar
from uuid import uuid4

from pydantic import ValidationError
from pydantic.alias_generators import to_snake

from ..api_client import ApiClient
from ..config import Settings, settings as default_settings
from ..errors import ApiError, NotFoundError
from ..schemas import StoreModel, normalize_document, now_iso, unwrap_envelope
from ..storage import LocalStore

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=StoreModel)


def to_field_names(model: Type[StoreModel], data: Dict[str, Any]) -> Dict[str, Any]:
    """Translate camelCase keys to the model's field names, leaving unknown keys as-is."""
    aliases = {info.alias or name: name for name, info in model.model_fields.items()}
    return {aliases.get(key, key): value for key, value in data.items()}


def to_aliases(model: Type[StoreModel], data: Dict[str, Any]) -> Dict[str, Any]:
    """Translate field names to the camelCase keys the API expects."""
    fields = model.model_fields
    return {(fields[key].alias or key) if key in fields else key: value for key, value in data.items()}


def sort_records(records: List[M], sort_by: str, sort_order: str = "asc") -> List[M]:
    """Sort on one field. Records without a value go last in either direction."""
    field = to_snake(sort_by)

    def key(record: M) -> Any:
        value = getattr(record, field)
        return value.lower() if isinstance(value, str) else value

    present = [r for r in records if getattr(r, field, None) is not None]
    missing = [r for r in records if getattr(r, field, None) is None]
    return sorted(present, key=key, reverse=sort_order == "desc") + missing


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit > 0 else 0


class FallbackService:
    """Base class wiring an API client and a local store to one record type."""

    storage_key: ClassVar[str] = ""
    model: ClassVar[Type[StoreModel]]
    label: ClassVar[str] = "Record"

    def __init__(
        self,
        client: Optional[ApiClient] = None,
        store: Optional[LocalStore] = None,
        config: Optional[Settings] = None,
    ) -> None:
        self.config = config or default_settings
        self.store = store or LocalStore(self.config.store_path)
        self.client = client or ApiClient(store=self.store, config=self.config)

    def run(self, description: str, remote: Callable[[], T], local: Callable[[], T]) -> T:
        try:
            return remote()
        except (ApiError, ValidationError) as exc:
            logger.info("%s failed (%s); using local store", description, exc)
            return local()

    def write(
        self,
        description: str,
        request: Callable[[], Any],
        local: Callable[[], Any],
        sent: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send a write to the API, falling back to ``local`` only if the request itself fails.

        Once the API has accepted the write, an unreadable response raises
        :class:`ApiError` instead of repeating the write locally.
        """
        try:
            payload = request()
        except ApiError as exc:
            logger.info("%s failed (%s); using local store", description, exc)
            return local()

        try:
            return self.parse(payload, sent=sent)
        except (ApiError, ValidationError) as exc:
            logger.warning("%s was accepted but the response could not be read: %s", description, exc)
            raise ApiError(f"Unreadable response to {description}", payload=payload) from exc

    # Response normalization
    def parse(self, payload: Any, sent: Optional[Dict[str, Any]] = None) -> Any:
        """Build a model from an API response, filling gaps from the record that was sent."""
        payload = unwrap_envelope(payload)
        if not isinstance(payload, dict):
            raise ApiError(f"Unexpected {self.label.lower()} payload: {type(payload).__name__}")
        return self.model.model_validate({**(sent or {}), **normalize_document(payload)})

    def parse_list(self, payload: Any, key: str) -> List[Any]:
        payload = unwrap_envelope(payload)
        if isinstance(payload, dict):
            payload = unwrap_envelope(payload.get(key))
        if not isinstance(payload, list):
            raise ApiError(f"Expected a list of {key}")
        return [self.model.model_validate(normalize_document(doc)) for doc in payload]

    # Local store access
    def load_local(self) -> List[Any]:
        records = []
        for raw in self.store.get_items(self.storage_key):
            try:
                records.append(self.model.model_validate(normalize_document(raw)))
            except ValidationError:
                logger.warning("Skipping malformed %s in %r", self.label.lower(), self.storage_key)
        return records

    def save_local(self, records: List[StoreModel]) -> None:
        self.store.set_items(self.storage_key, [record.to_record() for record in records])

    def local_get(self, record_id: str) -> Any:
        for record in self.load_local():
            if record.id == str(record_id):
                return record
        raise NotFoundError(self.label, str(record_id))

    def local_create(self, data: Dict[str, Any]) -> Any:
        timestamp = now_iso()
        fields = to_field_names(self.model, data)
        fields["created_at"] = fields.get("created_at") or timestamp
        fields["updated_at"] = fields.get("updated_at") or timestamp
        if not fields.get("id"):
            fields["id"] = str(uuid4())
        record = self.model.model_validate(fields)
        records = self.load_local()
        records.append(record)
        self.save_local(records)
        return record

    def local_update(self, record_id: str, changes: Dict[str, Any]) -> Any:
        records = self.load_local()
        for index, current in enumerate(records):
            if current.id == str(record_id):
                merged = {**current.model_dump(), **to_field_names(self.model, changes)}
                merged["id"] = current.id
                merged["updated_at"] = now_iso()
                records[index] = self.model.model_validate(merged)
                self.save_local(records)
                return records[index]
        raise NotFoundError(self.label, str(record_id))

    def local_delete(self, record_id: str) -> None:
        records = self.load_local()
        self.save_local([record for record in records if record.id != str(record_id)])
