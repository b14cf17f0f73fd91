"""Steepest descent with a nested line search."""

from __future__ import annotations

from ..backend import get_backend
from ..operator import OpWrapper
from ..state import IterData, IterState
from .base import LineSearch, Solver
from .line_search import run_line_search


class SteepestDescent(Solver):
    """Move along the negative gradient by the step a line search finds.

    Cost and gradient are evaluated at the current point every iteration
    and handed to the line search, which therefore does not evaluate them
    again.
    """

    name = "Steepest Descent"

    def __init__(self, linesearch: LineSearch) -> None:
        self.linesearch = linesearch

    def next_iter(self, op: OpWrapper, state: IterState) -> IterData:
        param = state.get_param()
        cost = op.apply(param)
        grad = op.gradient(param)
        direction = get_backend(param).scale(grad, -1.0)

        line_state = run_line_search(
            op, self.linesearch, param, direction, cost=cost, grad=grad
        )
        return IterData().param(line_state.get_param()).cost(line_state.get_cost())

    def __repr__(self) -> str:
        return f"SteepestDescent(linesearch={self.linesearch!r})"


__all__ = ["SteepestDescent"]
