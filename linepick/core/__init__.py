"""Core line buffering, selection and session state."""

from .buffer import LineBuffer, LineSource
from .emitter import emit_selected
from .selection import Decision, SelectionState
from .session import LoopSignal, Session
from .session_log import SessionLogger

__all__ = [
    "Decision",
    "LineBuffer",
    "LineSource",
    "LoopSignal",
    "SelectionState",
    "Session",
    "SessionLogger",
    "emit_selected",
]
