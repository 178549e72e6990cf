"""Per-visitor spin session: one draw, one rotation, one delayed reveal."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Callable, Optional

from ..draw.engine import DrawEngine, DrawResult, RandomSource
from ..draw.geometry import WheelGeometry
from ..draw.recovery import RecoveryPolicy, resample_with_fallback
from .gate import ActivationGate
from .scheduler import Scheduler

logger = logging.getLogger(__name__)

DEFAULT_SPIN_DURATION = 3.0
"""Seconds between the start of the spin and the reveal."""


class SpinPhase(str, Enum):
    IDLE = "idle"
    SPINNING = "spinning"
    REVEALED = "revealed"


@dataclass(frozen=True)
class SpinState:
    """Immutable snapshot of a spin session.

    Attributes
    ----------
    phase : SpinPhase
        Current phase; only ever moves forward.
    rotation_angle : float
        Absolute wheel rotation in degrees, fixed when the spin starts.
    draw_result : Optional[DrawResult]
        Published result; stays ``None`` until the reveal.
    """

    phase: SpinPhase = SpinPhase.IDLE
    rotation_angle: float = 0.0
    draw_result: Optional[DrawResult] = None


def begin_spin(state: SpinState, rotation_angle: float) -> SpinState:
    """Move an idle state to spinning; any other state is returned unchanged."""
    if state.phase is not SpinPhase.IDLE:
        return state
    return replace(state, phase=SpinPhase.SPINNING, rotation_angle=rotation_angle)


def reveal(state: SpinState, result: DrawResult) -> SpinState:
    """Move a spinning state to revealed and publish ``result``."""
    if state.phase is not SpinPhase.SPINNING:
        return state
    return replace(state, phase=SpinPhase.REVEALED, draw_result=result)


class SpinSession:
    """Host for a single visitor's :class:`SpinState`.

    Parameters
    ----------
    engine : DrawEngine
        Engine used for the single draw of this session.
    geometry : WheelGeometry
        Converts the drawn code into the wheel rotation.
    scheduler : Scheduler
        Runs the reveal once ``spin_duration`` seconds after the spin.
    random_source : Optional[RandomSource], default: None
        Defaults to :class:`random.SystemRandom`.
    today : Optional[Callable[[], date]], default: None
        Returns the current date in the campaign timezone. Defaults to the
        host's local :meth:`date.today`.
    gate : Optional[ActivationGate], default: None
        When given, :meth:`spin` is ignored until the gate fires. Without a
        gate the session is interactive immediately.
    recovery : RecoveryPolicy, default: resample_with_fallback
        Applied to every draw before the rotation is computed.
    spin_duration : float, default: 3.0
        Delay in seconds before the reveal.
    """

    def __init__(
        self,
        engine: DrawEngine,
        geometry: WheelGeometry,
        scheduler: Scheduler,
        *,
        random_source: Optional[RandomSource] = None,
        today: Optional[Callable[[], date]] = None,
        gate: Optional[ActivationGate] = None,
        recovery: RecoveryPolicy = resample_with_fallback,
        spin_duration: float = DEFAULT_SPIN_DURATION,
    ) -> None:
        if spin_duration < 0:
            raise ValueError("spin_duration must not be negative")
        self._engine = engine
        self._geometry = geometry
        self._scheduler = scheduler
        self._random = random_source or random.SystemRandom()
        self._today = today or date.today
        self._recovery = recovery
        self._spin_duration = spin_duration
        self._state = SpinState()
        # Drawn at spin time, published only by the reveal.
        self._pending: Optional[DrawResult] = None
        self._reveal_callbacks: list[Callable[[DrawResult], None]] = []
        self._ready = gate is None
        if gate is not None:
            gate.on_ready(self._mark_ready)

    @property
    def state(self) -> SpinState:
        return self._state

    @property
    def phase(self) -> SpinPhase:
        return self._state.phase

    @property
    def rotation_angle(self) -> float:
        return self._state.rotation_angle

    @property
    def draw_result(self) -> Optional[DrawResult]:
        return self._state.draw_result

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def can_spin(self) -> bool:
        return self._ready and self._state.phase is SpinPhase.IDLE

    @property
    def revealed_code(self) -> Optional[str]:
        """Uppercased reward code once revealed, for copy/share actions."""
        result = self._state.draw_result
        if result is None or not result.is_resolved:
            return None
        return result.reward_code.upper()

    def on_reveal(self, callback: Callable[[DrawResult], None]) -> None:
        """Register ``callback`` to receive the result when the reveal happens."""
        if self._state.phase is SpinPhase.REVEALED and self._state.draw_result is not None:
            callback(self._state.draw_result)
            return
        self._reveal_callbacks.append(callback)

    def spin(self) -> bool:
        """Draw, fix the rotation and schedule the reveal.

        Returns ``False`` without drawing when the session is not ready or has
        already spun.
        """
        if not self._ready:
            logger.debug("Spin ignored: wheel is not active yet")
            return False
        if self._state.phase is not SpinPhase.IDLE:
            logger.debug("Spin ignored: session is already %s", self._state.phase.value)
            return False

        # Everything that can fail, scheduling included, happens before the
        # phase changes. The reveal cannot fire before this method returns.
        day = self._today()
        result = self._engine.draw(day, self._random)
        result = self._recovery(self._engine, result, self._random)
        if result.is_resolved:
            angle = self._geometry.angle_for(result.reward_code)
        else:
            angle = 360.0 * self._geometry.min_rotations

        spinning = begin_spin(self._state, angle)
        self._scheduler.call_later(self._spin_duration, self._reveal)
        self._pending = result
        self._state = spinning
        return True

    def _mark_ready(self) -> None:
        self._ready = True

    def _reveal(self) -> None:
        result, self._pending = self._pending, None
        if result is None:
            return
        self._state = reveal(self._state, result)
        callbacks, self._reveal_callbacks = self._reveal_callbacks, []
        for callback in callbacks:
            callback(result)


__all__ = [
    "DEFAULT_SPIN_DURATION",
    "SpinPhase",
    "SpinSession",
    "SpinState",
    "begin_spin",
    "reveal",
]
