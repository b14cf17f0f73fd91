"""The executor drives a solver over an operator until a stopping rule fires.

Example
-------
>>> import numpy as np
>>> from optloop import Executor, Landweber, Problem
>>> problem = Problem(fun=lambda x: float(x @ x), grad=lambda x: 2 * x)
>>> res = Executor(problem, Landweber(0.25), np.array([1.0, -2.0]), max_iters=5).run()
>>> res.state.termination_reason.name
'MAX_ITERS_REACHED'
"""

from __future__ import annotations

import math
import signal
import sys
import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Iterator, Optional

from .diagnostics import is_debug_enabled
from .errors import ImpossibleStateError, InvalidParameterError, NumericalFailureError
from .logging import get_logger
from .observers import Observer, ObserverMode, Observers
from .operator import Operator, OpWrapper
from .state import IterState, TerminationReason

if TYPE_CHECKING:
    from .solver.base import Solver

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExecutorConfig:
    """
    Run configuration of an :class:`Executor`.

    Args:
        max_iters: Hard cap on the number of iterations. Must be non-negative.
        target_cost: The run stops once the cost is at or below this value.
        ctrlc: Install a SIGINT handler for the duration of the run. Nested
            runs started by solvers always disable it.
    """

    max_iters: int = sys.maxsize
    target_cost: float = -math.inf
    ctrlc: bool = True

    def __post_init__(self) -> None:
        if self.max_iters < 0:
            raise InvalidParameterError("max_iters must be non-negative")
        if math.isnan(self.target_cost):
            raise InvalidParameterError("target_cost must not be NaN")


@dataclass
class OptimizationResult:
    """Outcome of :meth:`Executor.run`."""

    operator: Operator
    state: IterState
    counts: dict[str, int]

    def __str__(self) -> str:
        state = self.state
        lines = [
            "OptimizationResult:",
            f"    param (best):  {state.best_param}",
            f"    cost (best):   {state.best_cost}",
            f"    param (last):  {state.param}",
            f"    cost (last):   {state.cost}",
            f"    iters:         {state.iter}",
            f"    evaluations:   {self.counts}",
            f"    termination:   {state.termination_reason}",
        ]
        return "\n".join(lines)


class _InterruptFlag:
    def __init__(self) -> None:
        self.raised = False

    def __call__(self, signum: int, frame: Any) -> None:
        self.raised = True


@contextmanager
def _interrupt_guard(enabled: bool) -> Iterator[_InterruptFlag]:
    """Route SIGINT to a flag for the duration of a run."""
    flag = _InterruptFlag()
    if not enabled or threading.current_thread() is not threading.main_thread():
        yield flag
        return
    previous = signal.signal(signal.SIGINT, flag)
    try:
        yield flag
    finally:
        signal.signal(signal.SIGINT, previous)


class Executor:
    """Runs ``solver`` on ``operator`` starting from ``init_param``.

    When ``operator`` already is an :class:`OpWrapper` it is used as-is, so
    a solver starting a nested run keeps a handle on the wrapper whose counts
    it has to consume afterwards.
    """

    def __init__(
        self,
        operator: Operator,
        solver: Solver,
        init_param: Any,
        config: Optional[ExecutorConfig] = None,
        *,
        max_iters: Optional[int] = None,
        target_cost: Optional[float] = None,
        ctrlc: Optional[bool] = None,
        cost: Optional[float] = None,
        grad: Optional[Any] = None,
        hessian: Optional[Any] = None,
    ) -> None:
        config = config if config is not None else ExecutorConfig()
        overrides = {
            key: value
            for key, value in (
                ("max_iters", max_iters),
                ("target_cost", target_cost),
                ("ctrlc", ctrlc),
            )
            if value is not None
        }
        self.config = replace(config, **overrides) if overrides else config
        self.op = operator if isinstance(operator, OpWrapper) else OpWrapper(operator)
        self.solver = solver
        self.state = IterState(init_param, self.config.max_iters)
        if cost is not None:
            self.state.set_cost(cost)
        if grad is not None:
            self.state.set_grad(grad)
        if hessian is not None:
            self.state.set_hessian(hessian)
        self.observers = Observers()

    def add_observer(
        self, observer: Observer, mode: ObserverMode = ObserverMode.ALWAYS
    ) -> Executor:
        self.observers.push(observer, mode)
        return self

    def run(self) -> OptimizationResult:
        """Run the solver until it terminates.

        Errors raised by the solver or the operator abort the run and
        propagate unchanged.
        """
        name = self.solver.name
        logger.info("%s: starting run (max_iters=%d)", name, self.config.max_iters)
        try:
            with _interrupt_guard(self.config.ctrlc) as interrupt:
                self._run(interrupt)
        except Exception as exc:
            logger.error(
                "%s: run aborted at iteration %d: %s", name, self.state.iter, exc
            )
            raise
        logger.info(
            "%s: finished after %d iterations (%s), cost %.6e",
            name,
            self.state.iter,
            self.state.termination_reason.name,
            self.state.cost,
        )
        return OptimizationResult(
            operator=self.op.get_op(), state=self.state, counts=self.op.counts()
        )

    def _run(self, interrupt: _InterruptFlag) -> None:
        state = self.state
        init_data = self.solver.init(self.op, state)
        kv: dict[str, Any] = {}
        if init_data is not None:
            state.update(init_data)
            kv = init_data.get_kv()
        self.observers.observe_init(self.solver.name, kv)

        if state.max_iters == 0:
            state.set_termination_reason(TerminationReason.MAX_ITERS_REACHED)
            return

        while not state.is_terminated():
            if interrupt.raised:
                state.set_termination_reason(TerminationReason.KEYBOARD_INTERRUPT)
                break

            counts_before = self.op.counts()
            data = self.solver.next_iter(self.op, state)
            new_best = state.update(data)
            state.increment_iter()
            if is_debug_enabled():
                self._check_invariants(counts_before)

            logger.debug(
                "%s: iter %d, cost %.6e, best cost %.6e",
                self.solver.name,
                state.iter,
                state.cost,
                state.best_cost,
            )
            self.observers.observe_iter(state, data.get_kv(), new_best)

            reason = self.solver.terminate_internal(state)
            if not reason.terminated and state.cost <= self.config.target_cost:
                reason = TerminationReason.TARGET_COST_REACHED
            if reason.terminated:
                state.set_termination_reason(reason)

    def _check_invariants(self, counts_before: dict[str, int]) -> None:
        if math.isnan(self.state.cost):
            raise NumericalFailureError(
                f"{self.solver.name} produced a NaN cost at iteration {self.state.iter}"
            )
        for key, value in self.op.counts().items():
            if value < counts_before[key]:
                raise ImpossibleStateError(f"{key} evaluation counter decreased")


__all__ = ["Executor", "ExecutorConfig", "OptimizationResult"]
