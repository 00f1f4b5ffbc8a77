"""
Sequential multi-call operations with compensation.

Some user actions need several backend calls. A `Saga` runs them in order;
when a step fails, completed steps are compensated in reverse order and the
result says exactly what happened.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from comandas_shared.api_client import ApiError
from comandas_shared.logging_config import LoggerAdapter, get_logger

logger = get_logger(__name__)


@dataclass
class SagaStep:
    """One backend call and, if it can be undone, how to undo it."""

    name: str
    action: Callable[[], Any]
    compensation: Callable[[], Any] | None = None


@dataclass
class SagaResult:
    completed: list[str] = field(default_factory=list)
    results: dict[str, Any] = field(default_factory=dict)
    failed_step: str | None = None
    error: ApiError | None = None
    compensated: list[str] = field(default_factory=list)
    compensation_failures: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed_step is None

    @property
    def partial(self) -> bool:
        """Some steps took effect and could not be undone."""
        if self.ok:
            return False
        return any(step not in self.compensated for step in self.completed)


class Saga:
    def __init__(self, name: str, steps: list[SagaStep]) -> None:
        self.name = name
        self.steps = steps
        self.log = LoggerAdapter(logger, {"saga": name})

    def run(self) -> SagaResult:
        result = SagaResult()
        done: list[SagaStep] = []

        for step in self.steps:
            try:
                result.results[step.name] = step.action()
            except ApiError as e:
                self.log.warning(f"{self.name}: step '{step.name}' failed ({e.status}): {e.message}")
                result.failed_step = step.name
                result.error = e
                self._compensate(done, result)
                return result
            done.append(step)
            result.completed.append(step.name)

        return result

    def _compensate(self, done: list[SagaStep], result: SagaResult) -> None:
        for step in reversed(done):
            if step.compensation is None:
                self.log.warning(f"{self.name}: step '{step.name}' has no compensation, left applied")
                continue
            try:
                step.compensation()
            except ApiError as e:
                self.log.error(
                    f"{self.name}: compensation for '{step.name}' failed ({e.status}): {e.message}"
                )
                result.compensation_failures.append(step.name)
            else:
                result.compensated.append(step.name)
