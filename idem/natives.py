"""
Idem Native Functions
=====================
The fixed table of builtin operations. Natives cannot be redefined by user
code: the interpreter always dispatches these names here first.

All values are unsigned 32-bit integers; arithmetic wraps modulo 2**32.
"""
from dataclasses import dataclass
from typing import Callable, Optional


U32_MASK = 0xFFFFFFFF


@dataclass(frozen=True)
class NativeInfo:
    """
    A native function.

    Each native carries:
      - name:       The name used at call sites
      - arguments:  Parameter names (the arity is their count)
      - apply:      The operation on evaluated parameter values
      - intent:     One-line description
      - yields:     False for operations that produce no value (print)
    """
    name: str
    arguments: tuple[str, ...]
    apply: Callable[..., Optional[int]]
    intent: str
    yields: bool = True

    @property
    def arity(self) -> int:
        return len(self.arguments)


def _u32(value: int) -> int:
    return value & U32_MASK


NATIVE_REGISTRY: dict[str, NativeInfo] = {

    "or": NativeInfo(
        name="or",
        arguments=("a", "b"),
        apply=lambda a, b: a | b,
        intent="Bitwise OR.",
    ),

    "and": NativeInfo(
        name="and",
        arguments=("a", "b"),
        apply=lambda a, b: a & b,
        intent="Bitwise AND.",
    ),

    "xor": NativeInfo(
        name="xor",
        arguments=("a", "b"),
        apply=lambda a, b: a ^ b,
        intent="Bitwise exclusive OR.",
    ),

    "not": NativeInfo(
        name="not",
        arguments=("a",),
        apply=lambda a: _u32(~a),
        intent="Bitwise complement over 32 bits.",
    ),

    "equal": NativeInfo(
        name="equal",
        arguments=("a", "b"),
        apply=lambda a, b: 1 if a == b else 0,
        intent="1 if both values are equal, 0 otherwise.",
    ),

    "add": NativeInfo(
        name="add",
        arguments=("a", "b"),
        apply=lambda a, b: _u32(a + b),
        intent="Sum, wrapping at 2**32.",
    ),

    "sub": NativeInfo(
        name="sub",
        arguments=("a", "b"),
        apply=lambda a, b: _u32(a - b),
        intent="Difference, wrapping below zero.",
    ),

    "multiply": NativeInfo(
        name="multiply",
        arguments=("a", "b"),
        apply=lambda a, b: _u32(a * b),
        intent="Product, wrapping at 2**32.",
    ),

    # The interpreter writes the result to its output channel and yields nothing.
    "print": NativeInfo(
        name="print",
        arguments=("a",),
        apply=lambda a: a,
        intent="Write the value to the program output.",
        yields=False,
    ),
}

NATIVE_NAMES = frozenset(NATIVE_REGISTRY)


def lookup(name: str) -> NativeInfo | None:
    """Look up a native function by name."""
    return NATIVE_REGISTRY.get(name)


def describe_all() -> str:
    """Return a formatted table of all native functions."""
    lines = [
        "name       arity  description",
        "─────────  ─────  ────────────────────────────────────",
    ]
    for name, info in NATIVE_REGISTRY.items():
        lines.append(f"{name.ljust(9)}  {str(info.arity).ljust(5)}  {info.intent}")
    return "\n".join(lines)
