"""Accumulators that collect per-file statistics."""

from __future__ import annotations

from typing import Callable, Dict

from .base import AccumulatorError, StatsAccumulator
from .memory import InMemoryAccumulator
from .spill import SpillingAccumulator

_FACTORIES: Dict[str, Callable[[], StatsAccumulator]] = {
    "memory": InMemoryAccumulator,
    "file": SpillingAccumulator,
}

ACCUMULATOR_KINDS = tuple(_FACTORIES)


def create_accumulator(kind: str) -> StatsAccumulator:
    """Instantiate the accumulator strategy registered under ``kind``."""
    factory = _FACTORIES.get(kind.lower())
    if factory is None:
        choices = ", ".join(ACCUMULATOR_KINDS)
        raise ValueError(f"Unknown accumulator '{kind}'. Choose one of: {choices}")
    return factory()


__all__ = [
    "ACCUMULATOR_KINDS",
    "AccumulatorError",
    "InMemoryAccumulator",
    "SpillingAccumulator",
    "StatsAccumulator",
    "create_accumulator",
]
