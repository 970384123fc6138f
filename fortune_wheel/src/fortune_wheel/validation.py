from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence

from .constants import (
    MIN_SLICES,
    MAX_SLICES,
    MAX_LABEL_LENGTH,
    MAX_TITLE_LENGTH,
    SLICE_EMPTY,
    SLICE_TOO_LONG,
    TOO_FEW_SLICES,
    TOO_MANY_SLICES,
    DUPLICATE_SLICE_ID,
)
from .models import Slice


@dataclass(frozen=True)
class ValidationResult:
    per_slice_errors: List[Optional[str]] = field(default_factory=list)
    count_error: Optional[str] = None
    title_error: Optional[str] = None
    id_error: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return (
            not any(self.per_slice_errors)
            and self.count_error is None
            and self.title_error is None
            and self.id_error is None
        )


def _label_of(item: Any) -> str:
    # Accept Slice models, plain dicts, or bare label strings
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        return str(item.get("label") or "")
    return str(getattr(item, "label", "") or "")


def _id_of(item: Any) -> Optional[str]:
    if isinstance(item, str):
        return None
    if isinstance(item, dict):
        return item.get("id")
    return getattr(item, "id", None)


def slice_error(label: str) -> Optional[str]:
    if not label.strip():
        return SLICE_EMPTY
    if len(label) > MAX_LABEL_LENGTH:
        return SLICE_TOO_LONG
    return None


def validate_slices(slices: Sequence[Any], title: Optional[str] = None) -> ValidationResult:
    """Check a candidate slice list (and optional title) against the wheel invariants.

    Errors are reported per index, in input order: ``"empty"`` when the label
    trims to nothing, ``"tooLong"`` when it exceeds 60 characters. The count
    error is ``"tooFew"`` below 2 slices and ``"tooMany"`` above 16. A slice id
    used twice sets ``id_error`` to ``"duplicateId"``.
    """
    errors = [slice_error(_label_of(s)) for s in slices]
    count_error = None
    if len(errors) < MIN_SLICES:
        count_error = TOO_FEW_SLICES
    elif len(errors) > MAX_SLICES:
        count_error = TOO_MANY_SLICES
    title_error = None
    if title is not None and len(title.strip()) > MAX_TITLE_LENGTH:
        title_error = SLICE_TOO_LONG
    ids = [i for i in (_id_of(s) for s in slices) if i]
    id_error = DUPLICATE_SLICE_ID if len(ids) != len(set(ids)) else None
    return ValidationResult(
        per_slice_errors=errors,
        count_error=count_error,
        title_error=title_error,
        id_error=id_error,
    )


def sanitize_slices(slices: Iterable[Slice]) -> List[Slice]:
    return [Slice(id=s.id, label=s.label.strip(), color=s.color) for s in slices]


def sanitize_title(title: Optional[str]) -> Optional[str]:
    title = (title or "").strip()
    return title or None
