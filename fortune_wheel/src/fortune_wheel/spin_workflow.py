import asyncio
import enum
import logging
import random
from typing import Optional

from .constants import MIN_SLICES, SPIN_DURATION_MS
from .errors import WheelNotFound
from .models import Slice, Wheel
from .spin import SpinResolution, resolve_spin
from .store import WheelStore

logger = logging.getLogger(__name__)


class SpinState(enum.Enum):
    IDLE = "idle"
    SPINNING = "spinning"
    RESOLVED = "resolved"


class SpinWorkflow:
    """Spin view for one wheel: IDLE -> SPINNING -> RESOLVED.

    ``start_spin`` resolves the outcome up front and schedules the reveal on
    the running event loop; the winner only becomes visible once ``resolve``
    fires. Spins are never persisted.
    """

    def __init__(
        self,
        store: WheelStore,
        rng: Optional[random.Random] = None,
        reveal_delay: float = SPIN_DURATION_MS / 1000,
    ):
        self.store = store
        self.rng = rng or random.Random()
        self.reveal_delay = reveal_delay
        self.wheel: Optional[Wheel] = None
        self.state = SpinState.IDLE
        self.rotation = 0.0
        self.winner: Optional[Slice] = None
        self._pending: Optional[SpinResolution] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._revealed: Optional[asyncio.Future] = None

    def load(self, wheel_id: str) -> Wheel:
        # Replacing the view drops any reveal still pending for the old one
        self.cancel()
        wheel = self.store.fetch(wheel_id)
        if wheel is None:
            raise WheelNotFound(wheel_id=wheel_id)
        self.wheel = wheel
        self.state = SpinState.IDLE
        self.rotation = 0.0
        self.winner = None
        return wheel

    def start_spin(self) -> Optional[SpinResolution]:
        """Begin a spin. Returns None (no-op) while a spin is already in flight."""
        if self.state is SpinState.SPINNING:
            return None
        if self.wheel is None or len(self.wheel.slices) < MIN_SLICES:
            raise ValueError("wheel must be loaded with at least two slices before spinning")

        self._cancel_timer()
        resolution = resolve_spin(len(self.wheel.slices), self.rotation, self.rng)
        self.rotation = resolution.target_rotation
        self.state = SpinState.SPINNING
        self.winner = None
        self._pending = resolution

        loop = asyncio.get_running_loop()
        self._revealed = loop.create_future()
        self._timer = loop.call_later(self.reveal_delay, self.resolve)
        logger.debug("Spin started on wheel %s -> index %d", self.wheel.id, resolution.chosen_index)
        return resolution

    def resolve(self) -> None:
        if self.state is not SpinState.SPINNING or self._pending is None:
            return
        self._timer = None
        self.winner = self.wheel.slices[self._pending.chosen_index]
        self._pending = None
        self.state = SpinState.RESOLVED
        if self._revealed is not None and not self._revealed.done():
            self._revealed.set_result(self.winner)

    def cancel(self) -> None:
        """Drop a pending reveal; the outcome is discarded, nothing is stored."""
        self._cancel_timer()
        if self.state is SpinState.SPINNING:
            self.state = SpinState.IDLE
            self._pending = None
        if self._revealed is not None and not self._revealed.done():
            self._revealed.cancel()

    close = cancel

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def wait_for_winner(self) -> Slice:
        if self.state is SpinState.RESOLVED and self.winner is not None:
            return self.winner
        if self._revealed is None:
            raise RuntimeError("no spin in progress")
        return await self._revealed
