"""Landweber iteration (gradient descent with a fixed step length)."""

from __future__ import annotations

from ..backend import get_backend
from ..operator import OpWrapper
from ..state import IterData, IterState
from .base import Solver


class Landweber(Solver):
    """Fixed-step gradient iteration ``x_{k+1} = x_k - omega * grad(x_k)``.

    The solver has no stopping rule of its own; runs end through the
    executor's iteration cap or target cost.
    """

    name = "Landweber"

    def __init__(self, omega: float) -> None:
        self.omega = float(omega)

    def next_iter(self, op: OpWrapper, state: IterState) -> IterData:
        param = state.get_param()
        grad = op.gradient(param)
        new_param = get_backend(param).scaled_sub(param, self.omega, grad)
        return IterData().param(new_param)

    def __repr__(self) -> str:
        return f"Landweber(omega={self.omega})"


__all__ = ["Landweber"]
