"""Spin session state machine and its collaborators."""

from .gate import ActivationGate
from .scheduler import AsyncioScheduler, Scheduler
from .session import (
    DEFAULT_SPIN_DURATION,
    SpinPhase,
    SpinSession,
    SpinState,
    begin_spin,
    reveal,
)

__all__ = [
    "ActivationGate",
    "AsyncioScheduler",
    "DEFAULT_SPIN_DURATION",
    "Scheduler",
    "SpinPhase",
    "SpinSession",
    "SpinState",
    "begin_spin",
    "reveal",
]
