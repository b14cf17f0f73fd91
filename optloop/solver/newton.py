"""Newton's method with a fixed damping factor."""

from __future__ import annotations

from ..backend import get_backend
from ..errors import InvalidParameterError
from ..operator import OpWrapper
from ..state import IterData, IterState
from .base import Solver


class Newton(Solver):
    """Newton iteration ``x_{k+1} = x_k - gamma * H(x_k)^{-1} grad(x_k)``.

    A singular Hessian raises :class:`~optloop.errors.NumericalFailureError`,
    which aborts the run.

    References:
        Nocedal & Wright, *Numerical Optimization* (2006), chapter 3.3.
    """

    name = "Newton method"

    def __init__(self, gamma: float = 1.0) -> None:
        self.gamma = 1.0
        self.set_gamma(gamma)

    def set_gamma(self, gamma: float) -> Newton:
        """Set the damping factor; it must lie in ``(0, 1]``."""
        if not 0.0 < gamma <= 1.0:
            raise InvalidParameterError("Newton: gamma must be in (0, 1].")
        self.gamma = float(gamma)
        return self

    def next_iter(self, op: OpWrapper, state: IterState) -> IterData:
        param = state.get_param()
        grad = op.gradient(param)
        hessian = op.hessian(param)
        backend = get_backend(param)
        direction = backend.mat_vec(backend.inv(hessian), grad)
        new_param = backend.scaled_sub(param, self.gamma, direction)
        return IterData().param(new_param)

    def __repr__(self) -> str:
        return f"Newton(gamma={self.gamma})"


__all__ = ["Newton"]
