"""BFGS quasi-Newton method with a nested line search.

References:
    Nocedal & Wright, *Numerical Optimization* (2006), chapter 6.1.
"""

from __future__ import annotations

import math
import sys
from typing import Any, Optional

from ..backend import get_backend
from ..logging import get_logger
from ..operator import OpWrapper
from ..state import IterData, IterState, TerminationReason
from .base import LineSearch, Solver
from .line_search import run_line_search

logger = get_logger(__name__)

EPSILON = sys.float_info.epsilon


class BFGS(Solver):
    """Full-memory BFGS on an approximate inverse Hessian.

    Args:
        init_inverse_hessian: Starting approximation, usually the identity.
        linesearch: Line search run once per iteration along ``-H g``.
    """

    name = "BFGS"

    def __init__(self, init_inverse_hessian: Any, linesearch: LineSearch) -> None:
        self._inv_hessian = init_inverse_hessian
        self.linesearch = linesearch

    @property
    def inv_hessian(self) -> Any:
        return self._inv_hessian

    def init(self, op: OpWrapper, state: IterState) -> Optional[IterData]:
        param = state.get_param()
        cost = op.apply(param)
        grad = op.gradient(param)
        return IterData().param(param).cost(cost).grad(grad)

    def next_iter(self, op: OpWrapper, state: IterState) -> IterData:
        param = state.get_param()
        cur_cost = state.get_cost()
        prev_grad = state.get_grad()
        backend = get_backend(param)

        direction = backend.scale(backend.mat_vec(self._inv_hessian, prev_grad), -1.0)
        line_state = run_line_search(
            op, self.linesearch, param, direction, cost=cur_cost, grad=prev_grad
        )
        xk1 = line_state.get_param()
        next_cost = line_state.get_cost()

        grad = op.gradient(xk1)
        yk = backend.sub(grad, prev_grad)
        sk = backend.sub(xk1, param)
        self._inv_hessian = self.update_inverse_hessian(self._inv_hessian, sk, yk)

        return IterData().param(xk1).cost(next_cost).grad(grad)

    @staticmethod
    def update_inverse_hessian(inv_hessian: Any, sk: Any, yk: Any) -> Any:
        """Rank-two secant update ``(I - rho s y^T) H (I - rho y s^T) + rho s s^T``.

        When the curvature ``y^T s`` is not positive the update is skipped
        and ``inv_hessian`` is returned unchanged.
        """
        backend = get_backend(sk)
        yksk = backend.dot(yk, sk)
        if not (yksk > 0.0 and math.isfinite(yksk)):
            logger.warning(
                "BFGS: curvature condition violated (y^T s = %.3e), skipping update",
                yksk,
            )
            return inv_hessian
        rhok = 1.0 / yksk
        eye = backend.eye_like(inv_hessian)
        mat1 = backend.scale(backend.outer(sk, yk), rhok)
        mat2 = backend.transpose(mat1)
        tmp1 = backend.sub(eye, mat1)
        tmp2 = backend.sub(eye, mat2)
        sksk = backend.scale(backend.outer(sk, sk), rhok)
        return backend.add(
            backend.mat_mul(tmp1, backend.mat_mul(inv_hessian, tmp2)), sksk
        )

    def terminate(self, state: IterState) -> TerminationReason:
        if get_backend(state.get_param()).norm(state.get_grad()) < math.sqrt(EPSILON):
            return TerminationReason.TARGET_PRECISION_REACHED
        if abs(state.prev_cost - state.cost) < EPSILON:
            return TerminationReason.NO_CHANGE_IN_COST
        return TerminationReason.NOT_TERMINATED

    def __repr__(self) -> str:
        return f"BFGS(linesearch={self.linesearch!r})"


__all__ = ["BFGS"]
