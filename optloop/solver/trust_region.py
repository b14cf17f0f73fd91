"""Trust-region method and the dogleg subproblem solver.

References:
    Nocedal & Wright, *Numerical Optimization* (2006), chapter 4.
"""

from __future__ import annotations

import math
import sys
from typing import Optional

import numpy as np

from ..backend import get_backend
from ..errors import ImpossibleStateError, InvalidParameterError
from ..executor import Executor
from ..operator import OpWrapper
from ..state import IterData, IterState, TerminationReason
from .base import Solver, TrustRegionSubproblem

EPSILON = sys.float_info.epsilon


def _dogleg_tau(utu: float, btb: float, utb: float, delta: float) -> float:
    """Path parameter where the dogleg path meets the trust-region boundary.

    Of the two roots the larger one is taken. When that is not finite (``t3``
    vanishes) the closed form ``(delta + btb - 2 utu) / (btb - utu)`` is used.
    """
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        utu, btb, utb, delta = (np.float64(v) for v in (utu, btb, utb, delta))
        t1 = 3.0 * utb - btb - 2.0 * utu
        t2 = np.sqrt(
            utb**2 - 2.0 * utb * delta + delta * btb - btb * utu + delta * utu
        )
        t3 = -2.0 * utb + btb + utu
        tau1 = -(t1 + t2) / t3
        tau2 = -(t1 - t2) / t3
        tau = np.fmax(tau1, tau2)
        if not np.isfinite(tau):
            tau = (delta + btb - 2.0 * utu) / (btb - utu)
    return float(tau)


class Dogleg(TrustRegionSubproblem):
    """Dogleg approximation of the trust-region subproblem.

    Follows the path from the origin to the Cauchy point ``pu`` and on to the
    Newton step ``pb`` until it meets the boundary of the region. The result
    ``param`` is the step ``pstar``. The radius must be set with
    :meth:`set_radius` before every run; one run solves one subproblem.
    """

    name = "Dogleg"

    def next_iter(self, op: OpWrapper, state: IterState) -> IterData:
        if math.isnan(self.radius):
            raise ImpossibleStateError("Dogleg: radius has not been set")
        param = state.get_param()
        backend = get_backend(param)
        g = state.get_grad() if state.has_grad else op.gradient(param)
        h = state.get_hessian() if state.has_hessian else op.hessian(param)

        pb = backend.scale(backend.mat_vec(backend.inv(h), g), -1.0)
        if backend.norm(pb) <= self.radius:
            return IterData().param(pb).kv(tau=2.0)

        with np.errstate(divide="ignore", invalid="ignore"):
            coeff = float(-np.float64(backend.dot(g, g)) / backend.weighted_dot(g, h, g))
        pu = backend.scale(g, coeff)

        utu = backend.dot(pu, pu)
        btb = backend.dot(pb, pb)
        utb = backend.dot(pu, pb)
        tau = _dogleg_tau(utu, btb, utb, self.radius**2)

        if 0.0 <= tau < 1.0:
            pstar = backend.scale(pu, tau)
        elif 1.0 <= tau <= 2.0:
            pstar = backend.scaled_add(pu, tau - 1.0, backend.sub(pb, pu))
        else:
            raise ImpossibleStateError(
                f"Dogleg: tau = {tau} lies outside [0, 2]; gradient or Hessian is corrupted"
            )
        return IterData().param(pstar).kv(tau=tau)

    def terminate(self, state: IterState) -> TerminationReason:
        if state.iter >= 1:
            return TerminationReason.MAX_ITERS_REACHED
        return TerminationReason.NOT_TERMINATED

    def __repr__(self) -> str:
        return f"Dogleg(radius={self.radius})"


class TrustRegion(Solver):
    """Trust-region method solving one subproblem per iteration.

    Args:
        subproblem: Solver for the step inside the region, e.g. :class:`Dogleg`.
        radius: Initial radius.
        max_radius: Upper bound for the radius.
        eta: Minimum ratio of actual to predicted reduction for a step to be
            accepted; must lie in ``[0, 0.25)``.
    """

    name = "Trust region"

    def __init__(
        self,
        subproblem: TrustRegionSubproblem,
        radius: float = 1.0,
        max_radius: float = 100.0,
        eta: float = 0.125,
    ) -> None:
        if not radius > 0:
            raise InvalidParameterError("radius must be positive")
        if not max_radius >= radius:
            raise InvalidParameterError("max_radius must be at least the initial radius")
        if not 0.0 <= eta < 0.25:
            raise InvalidParameterError("eta must lie in [0, 0.25)")
        self.subproblem = subproblem
        self.radius = float(radius)
        self.max_radius = float(max_radius)
        self.eta = float(eta)

    def init(self, op: OpWrapper, state: IterState) -> Optional[IterData]:
        param = state.get_param()
        cost = op.apply(param)
        grad = op.gradient(param)
        hessian = op.hessian(param)
        return IterData().param(param).cost(cost).grad(grad).hessian(hessian)

    def next_iter(self, op: OpWrapper, state: IterState) -> IterData:
        param = state.get_param()
        cost = state.get_cost()
        grad = state.get_grad()
        hessian = state.get_hessian()
        backend = get_backend(param)

        self.subproblem.set_radius(self.radius)
        sub_op = OpWrapper.new_from(op)
        result = Executor(
            sub_op, self.subproblem, param, ctrlc=False, grad=grad, hessian=hessian
        ).run()
        op.consume(sub_op)
        pk = result.state.get_param()

        new_param = backend.add(param, pk)
        new_cost = op.apply(new_param)
        model_cost = (
            cost + backend.dot(grad, pk) + 0.5 * backend.weighted_dot(pk, hessian, pk)
        )
        predicted = cost - model_cost
        # a non-finite trial cost counts as a failed step so the radius shrinks
        if predicted > 0 and math.isfinite(new_cost):
            rho = (cost - new_cost) / predicted
        else:
            rho = 0.0

        pk_norm = backend.norm(pk)
        if rho < 0.25:
            self.radius *= 0.25
        elif rho > 0.75 and pk_norm >= 0.9 * self.radius:
            self.radius = min(2.0 * self.radius, self.max_radius)

        if rho > self.eta and math.isfinite(new_cost):
            return (
                IterData()
                .param(new_param)
                .cost(new_cost)
                .grad(op.gradient(new_param))
                .hessian(op.hessian(new_param))
                .kv(radius=self.radius, rho=rho)
            )
        return (
            IterData()
            .param(param)
            .cost(cost)
            .grad(grad)
            .hessian(hessian)
            .kv(radius=self.radius, rho=rho)
        )

    def terminate(self, state: IterState) -> TerminationReason:
        if get_backend(state.get_param()).norm(state.get_grad()) < math.sqrt(EPSILON):
            return TerminationReason.TARGET_PRECISION_REACHED
        if self.radius < math.sqrt(EPSILON):
            return TerminationReason.TARGET_TOLERANCE_REACHED
        return TerminationReason.NOT_TERMINATED

    def __repr__(self) -> str:
        return f"TrustRegion(subproblem={self.subproblem!r}, radius={self.radius})"


__all__ = ["Dogleg", "TrustRegion"]
