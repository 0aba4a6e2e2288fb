"""First-acceptable search over an ordered list of candidates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Iterable, TypeVar, Union

T = TypeVar("T")
C = TypeVar("C")


@dataclass(frozen=True)
class Accepted(Generic[T]):
    value: T


@dataclass(frozen=True)
class Rejected:
    reason: str


Outcome = Union[Accepted[T], Rejected]


def find_first(
    candidates: Iterable[C],
    attempt: Callable[[C], "Outcome[T]"],
) -> "Outcome[T]":
    """Try candidates in order and return the first accepted outcome.

    Candidates after the accepted one are never attempted. When every
    candidate is rejected the last rejection is returned; an empty input
    yields ``Rejected("no candidates")``.
    """
    outcome: Outcome[T] = Rejected("no candidates")
    for candidate in candidates:
        outcome = attempt(candidate)
        if isinstance(outcome, Accepted):
            return outcome
    return outcome
