import logging
import uuid
from dataclasses import dataclass
from typing import List, Optional, Tuple

from . import default_palette
from .access import AccessControl
from .constants import MIN_SLICES, MAX_SLICES, MAX_LABEL_LENGTH, MAX_TITLE_LENGTH
from .errors import SliceValidationError
from .links import edit_link, spin_link
from .models import Slice, Wheel
from .store import WheelStore
from .validation import ValidationResult, sanitize_slices, sanitize_title, validate_slices

logger = logging.getLogger(__name__)

MODE_CREATE = "create"
MODE_EDIT = "edit"


@dataclass(frozen=True)
class ShareInfo:
    wheel_id: str
    edit_key: str
    mode: str
    spin_link: str
    edit_link: str


def new_slice_id() -> str:
    return str(uuid.uuid4())


def create_wheel(store: WheelStore, access: AccessControl, title: Optional[str], slices: List[Slice]) -> Tuple[str, str]:
    """Persist a new wheel and return ``(wheel_id, edit_key)``.

    The plaintext edit key is returned once and never stored.
    """
    result = validate_slices(slices, title)
    if not result.is_valid:
        raise SliceValidationError(result)
    edit_key = access.generate_secret()
    wheel_id = store.create(sanitize_title(title), sanitize_slices(slices), access.hash_secret(edit_key))
    logger.info("Created wheel %s with %d slices", wheel_id, len(slices))
    return wheel_id, edit_key


def update_wheel(store: WheelStore, access: AccessControl, wheel_id: str, edit_key: str,
                 title: Optional[str], slices: List[Slice]) -> Wheel:
    result = validate_slices(slices, title)
    if not result.is_valid:
        raise SliceValidationError(result)
    verified = access.verify(wheel_id, edit_key)
    fields = store.patch(verified, title=sanitize_title(title), slices=sanitize_slices(slices))
    return Wheel(
        id=wheel_id,
        title=fields["title"],
        slices=fields["slices"],
        created_at=verified.wheel.created_at,
        updated_at=fields["updated_at"],
    )


class BuilderWorkflow:
    """Editing session for one wheel draft.

    Validation problems stay inside the workflow: ``save()`` returns None and
    ``validation`` explains why. Access and store errors propagate to the
    caller, and the draft is left intact so the user can retry.
    """

    def __init__(self, store: WheelStore, access: Optional[AccessControl] = None, base_url: str = ""):
        self.store = store
        self.access = access or AccessControl(store)
        self.base_url = base_url
        self._palette = default_palette()
        self.title = ""
        self.slices: List[Slice] = self._initial_slices()
        self.is_dirty = False
        self.share_info: Optional[ShareInfo] = None
        self.edit_context: Optional[Tuple[str, str]] = None
        self.loaded: Optional[Wheel] = None

    @property
    def is_edit_mode(self) -> bool:
        return self.edit_context is not None

    @property
    def validation(self) -> ValidationResult:
        return validate_slices(self.slices, self.title)

    def _new_slice(self, index: int) -> Slice:
        return Slice(
            id=new_slice_id(),
            label=f"Slice {index + 1}",
            color=self._palette[index % len(self._palette)],
        )

    def _initial_slices(self) -> List[Slice]:
        return [self._new_slice(i) for i in range(MIN_SLICES)]

    def _index_of(self, slice_id: str) -> int:
        for idx, s in enumerate(self.slices):
            if s.id == slice_id:
                return idx
        raise KeyError(slice_id)

    def _touch(self) -> None:
        self.is_dirty = True
        self.share_info = None

    # --- Draft editing ---

    def set_title(self, title: str) -> None:
        self.title = (title or "")[:MAX_TITLE_LENGTH]
        self._touch()

    def set_label(self, slice_id: str, label: str) -> None:
        idx = self._index_of(slice_id)
        self.slices[idx] = self.slices[idx].model_copy(update={"label": (label or "")[:MAX_LABEL_LENGTH]})
        self._touch()

    def set_color(self, slice_id: str, color: str) -> None:
        idx = self._index_of(slice_id)
        self.slices[idx] = self.slices[idx].model_copy(update={"color": color})
        self._touch()

    def add_slice(self) -> Optional[Slice]:
        if len(self.slices) >= MAX_SLICES:
            return None
        new = self._new_slice(len(self.slices))
        self.slices.append(new)
        self._touch()
        return new

    def remove_slice(self, slice_id: str) -> bool:
        if len(self.slices) <= MIN_SLICES:
            return False
        idx = self._index_of(slice_id)
        del self.slices[idx]
        self._touch()
        return True

    def move_slice(self, slice_id: str, over_id: str) -> bool:
        """Move ``slice_id`` to the position currently held by ``over_id``."""
        if slice_id == over_id:
            return False
        try:
            old, new = self._index_of(slice_id), self._index_of(over_id)
        except KeyError:
            return False
        moved = self.slices.pop(old)
        self.slices.insert(new, moved)
        self._touch()
        return True

    def reset(self) -> None:
        if self.is_edit_mode and self.loaded is not None:
            self.title = self.loaded.title or ""
            self.slices = list(self.loaded.slices) or self._initial_slices()
        else:
            self.title = ""
            self.slices = self._initial_slices()
        self.is_dirty = False
        self.share_info = None

    # --- Persistence ---

    def load_for_editing(self, wheel_id: str, edit_key: str) -> Wheel:
        wheel = self.access.fetch_for_editing(wheel_id, edit_key)
        self.loaded = wheel
        self.edit_context = (wheel.id, edit_key)
        self.title = wheel.title or ""
        self.slices = list(wheel.slices) or self._initial_slices()
        self.is_dirty = False
        self.share_info = self._share(wheel.id, edit_key, MODE_EDIT)
        return wheel

    def save(self) -> Optional[ShareInfo]:
        try:
            if self.is_edit_mode:
                wheel_id, edit_key = self.edit_context
                update_wheel(self.store, self.access, wheel_id, edit_key, self.title, self.slices)
                mode = MODE_EDIT
            else:
                wheel_id, edit_key = create_wheel(self.store, self.access, self.title, self.slices)
                self.edit_context = (wheel_id, edit_key)
                mode = MODE_CREATE
        except SliceValidationError as exc:
            logger.info("Save blocked by validation: %s", exc.result)
            return None

        self.slices = sanitize_slices(self.slices)
        self.loaded = Wheel(id=wheel_id, title=sanitize_title(self.title), slices=self.slices)
        self.is_dirty = False
        self.share_info = self._share(wheel_id, edit_key, mode)
        return self.share_info

    def _share(self, wheel_id: str, edit_key: str, mode: str) -> ShareInfo:
        return ShareInfo(
            wheel_id=wheel_id,
            edit_key=edit_key,
            mode=mode,
            spin_link=spin_link(self.base_url, wheel_id),
            edit_link=edit_link(self.base_url, wheel_id, edit_key),
        )
