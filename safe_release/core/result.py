"""Result type for explicit error handling.

Every release step that can fail (resolving a target, compiling a binary,
packaging an archive) returns ``Ok(value)`` or ``Err(error)`` instead of
raising, so callers decide whether a failure is fatal.

Usage:
    match matrix.get("x86_64-unknown-linux-musl"):
        case Ok(target):
            console.print(f"{target} builds with {target.strategy}")
        case Err(error):
            print_error(error, console)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import NoReturn, TypeGuard

__all__ = ["Err", "Ok", "Result", "is_err", "is_ok"]


@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map[U](self, f: Callable[[T], U]) -> Ok[U]:
        return Ok(f(self.value))


@dataclass(frozen=True, slots=True)
class Err[E]:
    error: E

    def unwrap(self) -> NoReturn:
        """Raise ValueError; only for call sites that already checked the result."""
        raise ValueError(f"called unwrap on Err: {self.error}")

    def unwrap_or[T](self, default: T) -> T:
        return default

    def map(self, f: Callable[..., object]) -> Err[E]:
        return self


type Result[T, E] = Ok[T] | Err[E]


def is_ok[T, E](result: Result[T, E]) -> TypeGuard[Ok[T]]:
    return isinstance(result, Ok)


def is_err[T, E](result: Result[T, E]) -> TypeGuard[Err[E]]:
    return isinstance(result, Err)
