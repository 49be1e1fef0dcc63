"""
Call Observers
==============
Hooks the interpreter invokes around every function call. Observers watch
evaluation without taking part in it: they receive the call and its result
but cannot change either.

    CallObserver      — no-op default
    LoggingObserver   — logs enter/exit through the `logging` module
    RecordingObserver — keeps every event in memory, for embedding hosts
"""
import logging
from dataclasses import dataclass
from typing import Optional

from .parser import FunctionCallNode


class CallObserver:
    """Base observer. Does nothing."""

    def enter_call(self, call: FunctionCallNode, arguments: list[int], depth: int) -> None:
        pass

    def exit_call(self, call: FunctionCallNode, result: Optional[int], depth: int) -> None:
        pass


class LoggingObserver(CallObserver):
    """Logs one line per call boundary at the configured level."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.DEBUG):
        self.logger = logger or logging.getLogger("idem.trace")
        self.level = level

    def enter_call(self, call, arguments, depth):
        self.logger.log(
            self.level, "%s→ %s(%s) at %s",
            "  " * depth, call.name, ", ".join(str(a) for a in arguments), call.location,
        )

    def exit_call(self, call, result, depth):
        shown = "∅" if result is None else result
        self.logger.log(self.level, "%s← %s = %s", "  " * depth, call.name, shown)


@dataclass
class CallEvent:
    """One recorded call boundary."""
    kind: str            # "enter" or "exit"
    name: str
    depth: int
    arguments: tuple[int, ...] = ()
    result: Optional[int] = None


class RecordingObserver(CallObserver):
    """Collects call events in order."""

    def __init__(self):
        self.events: list[CallEvent] = []

    def enter_call(self, call, arguments, depth):
        self.events.append(CallEvent("enter", call.name, depth, arguments=tuple(arguments)))

    def exit_call(self, call, result, depth):
        self.events.append(CallEvent("exit", call.name, depth, result=result))

    @property
    def call_names(self) -> list[str]:
        return [e.name for e in self.events if e.kind == "enter"]
