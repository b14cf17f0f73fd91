"""Line searches that run as nested solvers inside an outer iteration.

A line search starts at the outer solver's current point and moves along
the search direction set with :meth:`LineSearch.set_search_direction`. The
outer solver runs it through :func:`run_line_search`, which takes care of
the evaluation bookkeeping.

References:
    Nocedal & Wright, *Numerical Optimization* (2006), chapter 3.
"""

from __future__ import annotations

import math
from typing import Any, Optional

from ..backend import get_backend
from ..errors import ImpossibleStateError, InvalidParameterError
from ..executor import Executor
from ..operator import OpWrapper
from ..state import IterData, IterState, TerminationReason
from .base import LineSearch


def run_line_search(
    op: OpWrapper,
    linesearch: LineSearch,
    param: Any,
    direction: Any,
    cost: Optional[float] = None,
    grad: Optional[Any] = None,
) -> IterState:
    """Run ``linesearch`` from ``param`` along ``direction`` and return its final state.

    The nested run works on a fresh wrapper whose counts are merged into
    ``op`` once it has finished.
    """
    linesearch.set_search_direction(direction)
    line_op = OpWrapper.new_from(op)
    result = Executor(line_op, linesearch, param, ctrlc=False, cost=cost, grad=grad).run()
    op.consume(line_op)
    return result.state


class _LineSearchBase(LineSearch):
    def __init__(self, max_trials: int) -> None:
        super().__init__()
        if max_trials < 1:
            raise InvalidParameterError("max_trials must be at least 1")
        self.max_trials = int(max_trials)
        self._trials = 0
        self._done: Optional[TerminationReason] = None

    def _start(self, op: OpWrapper, state: IterState) -> IterData:
        """Evaluate (or reuse) cost and gradient at the starting point."""
        if self.search_direction is None:
            raise ImpossibleStateError(f"{self.name}: search direction not set")
        x0 = state.get_param()
        backend = get_backend(x0)
        cost0 = state.get_cost()
        if math.isinf(cost0):
            cost0 = op.apply(x0)
        grad0 = state.get_grad() if state.has_grad else op.gradient(x0)
        slope = backend.dot(grad0, self.search_direction)

        self._backend = backend
        self._x0 = x0
        self._cost0 = float(cost0)
        self._grad0 = grad0
        self._slope = slope
        self._trials = 0
        self._done = None
        if backend.norm(self.search_direction) == 0.0:
            self._done = TerminationReason.LINE_SEARCH_CONDITION_MET
        elif not slope < 0.0:
            raise InvalidParameterError("Search direction must be a descent direction.")
        return IterData().param(x0).cost(cost0).grad(grad0)

    def _point(self, alpha: float) -> Any:
        return self._backend.scaled_add(self._x0, alpha, self.search_direction)

    def terminate(self, state: IterState) -> TerminationReason:
        if self._done is not None:
            return self._done
        if self._trials >= self.max_trials:
            return TerminationReason.MAX_ITERS_REACHED
        return TerminationReason.NOT_TERMINATED


class BacktrackingLineSearch(_LineSearchBase):
    """Armijo backtracking: shrink ``alpha`` by ``rho`` until sufficient decrease."""

    name = "Backtracking line search"

    def __init__(self, c: float = 1e-4, rho: float = 0.5, max_trials: int = 50) -> None:
        if not (0 < c < 1):
            raise InvalidParameterError("Armijo constant c must lie in (0, 1)")
        if not (0 < rho < 1):
            raise InvalidParameterError("rho must lie in (0, 1)")
        super().__init__(max_trials)
        self.c = float(c)
        self.rho = float(rho)
        self._alpha = self.init_alpha

    def init(self, op: OpWrapper, state: IterState) -> Optional[IterData]:
        data = self._start(op, state)
        self._alpha = self.init_alpha
        return data

    def next_iter(self, op: OpWrapper, state: IterState) -> IterData:
        if self._done is not None:
            return IterData().kv(alpha=0.0)
        alpha = self._alpha
        candidate = self._point(alpha)
        cost = op.apply(candidate)
        self._trials += 1
        if cost <= self._cost0 + self.c * alpha * self._slope:
            self._done = TerminationReason.LINE_SEARCH_CONDITION_MET
        else:
            self._alpha = alpha * self.rho
        return IterData().param(candidate).cost(cost).kv(alpha=alpha)

    def __repr__(self) -> str:
        return f"BacktrackingLineSearch(c={self.c}, rho={self.rho})"


class StrongWolfeLineSearch(_LineSearchBase):
    """Strong Wolfe line search by bracketing and bisection zoom.

    One trial step length is evaluated per iteration. Every iteration reports
    the best step found so far that satisfies the sufficient decrease
    condition, so the final state never holds a rejected point.
    """

    name = "Strong Wolfe line search"

    def __init__(
        self, c1: float = 1e-4, c2: float = 0.9, max_trials: int = 72
    ) -> None:
        if not (0 < c1 < c2 < 1):
            raise InvalidParameterError("Require 0 < c1 < c2 < 1 for Wolfe conditions.")
        super().__init__(max_trials)
        self.c1 = float(c1)
        self.c2 = float(c2)

    def init(self, op: OpWrapper, state: IterState) -> Optional[IterData]:
        data = self._start(op, state)
        self._zoom = False
        self._alpha = self.init_alpha
        # lo: best step satisfying sufficient decrease; hi: other end of the bracket
        self._lo = 0.0
        self._cost_lo = self._cost0
        self._grad_lo: Optional[Any] = self._grad0
        self._hi = 0.0
        return data

    def _report(self) -> IterData:
        data = IterData().param(self._point(self._lo)).cost(self._cost_lo)
        if self._grad_lo is not None:
            data.grad(self._grad_lo)
        return data.kv(alpha=self._lo)

    def _sufficient_decrease(self, alpha: float, cost: float) -> bool:
        return cost <= self._cost0 + self.c1 * alpha * self._slope

    def _curvature(self, der: float) -> bool:
        return abs(der) <= -self.c2 * self._slope

    def _move_lo(self, alpha: float, cost: float, grad: Any) -> None:
        self._lo = alpha
        self._cost_lo = cost
        self._grad_lo = grad

    def next_iter(self, op: OpWrapper, state: IterState) -> IterData:
        if self._done is not None:
            return self._report()
        self._trials += 1
        if self._zoom:
            self._zoom_step(op)
        else:
            self._bracket_step(op)
        return self._report()

    def _bracket_step(self, op: OpWrapper) -> None:
        alpha = self._alpha
        candidate = self._point(alpha)
        cost = op.apply(candidate)
        if not self._sufficient_decrease(alpha, cost) or (
            self._lo > 0.0 and cost >= self._cost_lo
        ):
            self._hi = alpha
            self._zoom = True
            return
        grad = op.gradient(candidate)
        der = self._backend.dot(grad, self.search_direction)
        if self._curvature(der):
            self._move_lo(alpha, cost, grad)
            self._done = TerminationReason.LINE_SEARCH_CONDITION_MET
            return
        if der >= 0:
            self._hi = self._lo
            self._move_lo(alpha, cost, grad)
            self._zoom = True
            return
        self._move_lo(alpha, cost, grad)
        self._alpha = 2.0 * alpha

    def _zoom_step(self, op: OpWrapper) -> None:
        alpha = 0.5 * (self._lo + self._hi)
        candidate = self._point(alpha)
        cost = op.apply(candidate)
        if not self._sufficient_decrease(alpha, cost) or cost >= self._cost_lo:
            self._hi = alpha
        else:
            grad = op.gradient(candidate)
            der = self._backend.dot(grad, self.search_direction)
            if self._curvature(der):
                self._move_lo(alpha, cost, grad)
                self._done = TerminationReason.LINE_SEARCH_CONDITION_MET
                return
            if der * (self._hi - self._lo) >= 0:
                self._hi = self._lo
            self._move_lo(alpha, cost, grad)
        if abs(self._hi - self._lo) < 1e-12:
            self._done = TerminationReason.TARGET_TOLERANCE_REACHED

    def __repr__(self) -> str:
        return f"StrongWolfeLineSearch(c1={self.c1}, c2={self.c2})"


__all__ = ["BacktrackingLineSearch", "StrongWolfeLineSearch", "run_line_search"]
