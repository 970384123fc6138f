import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import redis

from .errors import StoreUnavailable, WheelNotFound
from .models import Slice, Wheel, WheelRecord
from .redis_client import get_redis

logger = logging.getLogger(__name__)


# Marks a patch field the caller did not send
_UNSET: Any = object()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class WheelStore(ABC):
    """Keyed document store for wheels.

    ``fetch`` returns the public view and is safe to hand to any reader.
    ``fetch_record`` returns the privileged view including the edit key hash;
    only access control calls it. ``patch`` takes a VerifiedAccess capability
    and never touches the hash.
    """

    @abstractmethod
    def create(self, title: Optional[str], slices: List[Slice], edit_key_hash: str) -> str:
        ...

    @abstractmethod
    def fetch_record(self, wheel_id: str) -> Optional[WheelRecord]:
        ...

    @abstractmethod
    def _write_patch(self, wheel_id: str, fields: Dict[str, Any]) -> None:
        ...

    def fetch(self, wheel_id: str) -> Optional[Wheel]:
        record = self.fetch_record(wheel_id)
        if record is None:
            return None
        return record.public()

    def patch(self, access, title: Optional[str] = _UNSET, slices: Optional[List[Slice]] = None) -> Dict[str, Any]:
        """Replace title/slices on a verified wheel; returns the updated fields.

        Omitted fields are left as stored. Passing ``title=None`` clears the title.

        Last write wins: there is no concurrency check between two holders
        of the same edit key.
        """
        wheel_id = access.consume()
        fields: Dict[str, Any] = {"updated_at": _now()}
        if title is not _UNSET:
            fields["title"] = title
        if slices is not None:
            fields["slices"] = list(slices)
        self._write_patch(wheel_id, fields)
        logger.info("Patched wheel %s (%s)", wheel_id, ", ".join(sorted(fields)))
        return fields


class RedisWheelStore(WheelStore):
    """Wheels live in hash ``wheel:<id>``; the edit key hash lives in a separate
    hash ``wheel:<id>:edit_key`` so HGETALL on the wheel never exposes it."""

    def __init__(self, client: Optional[redis.Redis] = None):
        self._client = client

    @property
    def client(self) -> redis.Redis:
        # Resolve lazily so tests can patch get_redis
        return self._client or get_redis()

    @staticmethod
    def _key(wheel_id: str) -> str:
        return f"wheel:{wheel_id}"

    def create(self, title: Optional[str], slices: List[Slice], edit_key_hash: str) -> str:
        r = self.client
        now = _now()
        try:
            wheel_id = str(r.incr("wheel_id_counter"))
            key = self._key(wheel_id)
            pipe = r.pipeline(transaction=True)
            pipe.hset(key, mapping={
                "title": json.dumps(title),
                "slices": json.dumps([s.model_dump() for s in slices]),
                "created_at": now,
                "updated_at": now,
            })
            pipe.hset(f"{key}:edit_key", mapping={
                "hash": edit_key_hash,
                "created_at": now,
            })
            pipe.execute()
        except redis.exceptions.RedisError as exc:
            logger.warning("Failed to create wheel: %s", exc)
            raise StoreUnavailable(str(exc)) from exc
        return wheel_id

    def fetch_record(self, wheel_id: str) -> Optional[WheelRecord]:
        r = self.client
        key = self._key(wheel_id)
        try:
            data = r.hgetall(key)
            if not data:
                return None
            secret = r.hgetall(f"{key}:edit_key") or {}
        except redis.exceptions.RedisError as exc:
            logger.warning("Failed to fetch wheel %s: %s", wheel_id, exc)
            raise StoreUnavailable(str(exc), wheel_id=wheel_id) from exc
        try:
            return WheelRecord(
                id=wheel_id,
                title=json.loads(data.get("title", "null")),
                slices=json.loads(data.get("slices", "[]")),
                created_at=data.get("created_at"),
                updated_at=data.get("updated_at"),
                edit_key_hash=secret.get("hash") or None,
                edit_key_created_at=secret.get("created_at"),
            )
        except ValueError as exc:
            # JSONDecodeError and pydantic's ValidationError are both ValueErrors
            logger.warning("Corrupt wheel document %s: %s", wheel_id, exc)
            raise StoreUnavailable(f"corrupt wheel document {wheel_id}", wheel_id=wheel_id) from exc

    def _write_patch(self, wheel_id: str, fields: Dict[str, Any]) -> None:
        r = self.client
        key = self._key(wheel_id)
        mapping = {"updated_at": fields["updated_at"]}
        if "title" in fields:
            mapping["title"] = json.dumps(fields["title"])
        if "slices" in fields:
            mapping["slices"] = json.dumps([s.model_dump() for s in fields["slices"]])
        try:
            if not r.exists(key):
                raise WheelNotFound(wheel_id=wheel_id)
            r.hset(key, mapping=mapping)
        except redis.exceptions.RedisError as exc:
            logger.warning("Failed to patch wheel %s: %s", wheel_id, exc)
            raise StoreUnavailable(str(exc), wheel_id=wheel_id) from exc


class InMemoryWheelStore(WheelStore):
    """Dictionary-backed store with the same contract, for tests and local use."""

    def __init__(self):
        self._docs: Dict[str, Dict[str, Any]] = {}
        self._counter = 0

    def create(self, title: Optional[str], slices: List[Slice], edit_key_hash: str) -> str:
        self._counter += 1
        wheel_id = str(self._counter)
        now = _now()
        self._docs[wheel_id] = {
            "title": title,
            "slices": [s.model_dump() for s in slices],
            "created_at": now,
            "updated_at": now,
            "edit_key_hash": edit_key_hash,
            "edit_key_created_at": now,
        }
        return wheel_id

    def fetch_record(self, wheel_id: str) -> Optional[WheelRecord]:
        doc = self._docs.get(wheel_id)
        if doc is None:
            return None
        return WheelRecord(id=wheel_id, **doc)

    def _write_patch(self, wheel_id: str, fields: Dict[str, Any]) -> None:
        doc = self._docs.get(wheel_id)
        if doc is None:
            raise WheelNotFound(wheel_id=wheel_id)
        doc["updated_at"] = fields["updated_at"]
        if "title" in fields:
            doc["title"] = fields["title"]
        if "slices" in fields:
            doc["slices"] = [s.model_dump() for s in fields["slices"]]

    def put_raw(self, wheel_id: str, **doc: Any) -> None:
        """Seed a document directly, bypassing create (e.g. one without a hash)."""
        self._docs[wheel_id] = doc
