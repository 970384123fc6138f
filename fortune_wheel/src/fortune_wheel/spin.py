import math
import random
from dataclasses import dataclass
from typing import Optional

from .constants import (
    MIN_SLICES,
    MIN_EXTRA_SPINS,
    MAX_EXTRA_SPINS,
    SAFETY_MARGIN_FRACTION,
    SAFETY_MARGIN_CAP_DEG,
)


@dataclass(frozen=True)
class SpinResolution:
    chosen_index: int
    target_rotation: float
    spins: int
    offset: float


def slice_at(rotation: float, slice_count: int) -> int:
    """Index of the slice under the fixed pointer after rotating the face clockwise
    by ``rotation`` degrees. Slice i spans [i*arc, (i+1)*arc) from the face's zero mark.
    """
    arc = 360.0 / slice_count
    face_angle = (360.0 - (rotation % 360.0)) % 360.0
    # Guard against face_angle rounding up to exactly 360
    return min(int(math.floor(face_angle / arc)), slice_count - 1)


def resolve_spin(slice_count: int, current_rotation: float = 0.0, rng: Optional[random.Random] = None) -> SpinResolution:
    """Pick a slice and the forward rotation that lands the pointer inside it.

    ``rng`` needs ``randrange``, ``randint`` and ``uniform`` (a random.Random works).
    The stop point is jittered around the slice center but kept a safety margin
    away from both edges, and the result is always strictly greater than
    ``current_rotation``.
    """
    if slice_count < MIN_SLICES:
        raise ValueError(f"a wheel needs at least {MIN_SLICES} slices, got {slice_count}")
    rng = rng or random.Random()

    arc = 360.0 / slice_count
    chosen_index = rng.randrange(slice_count)
    spins = rng.randint(MIN_EXTRA_SPINS, MAX_EXTRA_SPINS)

    half = arc / 2
    margin = min(half * SAFETY_MARGIN_FRACTION, SAFETY_MARGIN_CAP_DEG)
    max_offset = max(half - margin, 0.0)
    offset = rng.uniform(-max_offset, max_offset) if max_offset else 0.0

    desired_face_angle = chosen_index * arc + half + offset
    desired_mod = (360.0 - desired_face_angle) % 360.0

    current_mod = current_rotation % 360.0
    after_spins = (current_mod + spins * 360) % 360.0
    delta = (desired_mod - after_spins + 360.0) % 360.0
    if delta == 0:
        delta = 360.0

    target = current_rotation + spins * 360 + delta
    return SpinResolution(chosen_index=chosen_index, target_rotation=target, spins=spins, offset=offset)
