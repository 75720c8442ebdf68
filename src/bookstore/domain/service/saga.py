"""A minimal saga: run steps in order, undo completed ones on failure.

Checkout and payment confirmation both touch books, the order and the cart.
None of the stores share a transaction, so each step that succeeded
registers a compensating action that runs, newest first, if a later step
raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SagaStep:
    name: str
    action: Callable[[], None]
    compensation: Callable[[], None] | None = None


class Saga:

    def __init__(self, name: str) -> None:
        self.name = name
        self._steps: list[SagaStep] = []

    def step(
        self,
        name: str,
        action: Callable[[], None],
        compensation: Callable[[], None] | None = None,
    ) -> Saga:
        self._steps.append(SagaStep(name, action, compensation))
        return self

    def run(self) -> None:
        done: list[SagaStep] = []
        for step in self._steps:
            try:
                step.action()
            except Exception:
                logger.error("Saga step failed, compensating", saga=self.name, step=step.name)
                self._compensate(done)
                raise
            done.append(step)

    def _compensate(self, done: list[SagaStep]) -> None:
        for step in reversed(done):
            if step.compensation is None:
                continue
            try:
                step.compensation()
            except Exception:
                # Keep undoing the remaining steps; the original error is re-raised by run().
                logger.exception("Compensation failed", saga=self.name, step=step.name)
