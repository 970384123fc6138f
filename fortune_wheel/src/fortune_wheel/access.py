import hashlib
import hmac
import logging
import secrets
from typing import Callable, Optional

from .constants import EDIT_KEY_BYTES
from .errors import EditKeyMissing, InvalidEditKey, WheelNotFound
from .models import Wheel, WheelRecord
from .store import WheelStore

logger = logging.getLogger(__name__)

HashFn = Callable[[bytes], bytes]
RandomBytesFn = Callable[[int], bytes]


def _sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


class VerifiedAccess:
    """Proof that the holder presented the right edit key for ``wheel_id``.

    Good for exactly one patch: ``consume()`` hands back the wheel id the
    first time and raises afterwards.
    """

    def __init__(self, record: WheelRecord):
        self._record = record
        self._used = False

    @property
    def wheel_id(self) -> str:
        return self._record.id

    @property
    def wheel(self) -> Wheel:
        return self._record.public()

    @property
    def used(self) -> bool:
        return self._used

    def consume(self) -> str:
        if self._used:
            raise RuntimeError(f"edit access for wheel {self.wheel_id} was already used")
        self._used = True
        return self.wheel_id


class AccessControl:
    """Possession-based edit access: mint a secret, keep only its digest, verify later."""

    def __init__(
        self,
        store: WheelStore,
        hash_fn: HashFn = _sha256,
        random_bytes: RandomBytesFn = secrets.token_bytes,
    ):
        self.store = store
        self._hash = hash_fn
        self._random_bytes = random_bytes

    def generate_secret(self) -> str:
        return self._random_bytes(EDIT_KEY_BYTES).hex()

    def hash_secret(self, token: str) -> str:
        return self._hash(token.encode("utf-8")).hex()

    def verify(self, wheel_id: str, token: str) -> VerifiedAccess:
        record = self.store.fetch_record(wheel_id)
        if record is None:
            logger.warning("Edit attempt on unknown wheel %s", wheel_id)
            raise WheelNotFound(wheel_id=wheel_id)
        if not record.edit_key_hash:
            logger.warning("Wheel %s has no edit key hash", wheel_id)
            raise EditKeyMissing(wheel_id=wheel_id)
        supplied = self.hash_secret(token or "")
        # Full-digest comparison in constant time
        if not hmac.compare_digest(supplied, record.edit_key_hash):
            logger.warning("Invalid edit key for wheel %s", wheel_id)
            raise InvalidEditKey(wheel_id=wheel_id)
        return VerifiedAccess(record)

    def fetch_for_editing(self, wheel_id: str, token: str) -> Wheel:
        return self.verify(wheel_id, token).wheel

    def is_valid_edit_key(self, wheel_id: str, token: Optional[str]) -> bool:
        try:
            self.verify(wheel_id, token or "")
        except (WheelNotFound, EditKeyMissing, InvalidEditKey):
            return False
        return True
