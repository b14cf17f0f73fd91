"""Iteration state, per-step results and termination reasons."""

from __future__ import annotations

import copy
import math
from enum import Enum
from typing import Any, Optional

from .backend import get_backend
from .errors import ImpossibleStateError


class TerminationReason(Enum):
    """Why a run stopped."""

    NOT_TERMINATED = "Not terminated"
    MAX_ITERS_REACHED = "Maximum number of iterations reached"
    TARGET_COST_REACHED = "Target cost value reached"
    TARGET_PRECISION_REACHED = "Target precision reached"
    TARGET_TOLERANCE_REACHED = "Target tolerance reached"
    NO_CHANGE_IN_COST = "No change in cost function value"
    LINE_SEARCH_CONDITION_MET = "Line search condition met"
    KEYBOARD_INTERRUPT = "Keyboard interrupt"
    ABORTED = "Optimization aborted"

    @property
    def terminated(self) -> bool:
        return self is not TerminationReason.NOT_TERMINATED

    def __str__(self) -> str:
        return self.value


class IterData:
    """Sparse result of one solver step.

    Setters return ``self`` so results read as a chain::

        IterData().param(x).cost(fx).grad(g)

    Fields that were never set are reported as ``None`` and are left
    untouched when the executor merges the result into :class:`IterState`.
    """

    def __init__(self) -> None:
        self._param: Optional[Any] = None
        self._cost: Optional[float] = None
        self._grad: Optional[Any] = None
        self._hessian: Optional[Any] = None
        self._kv: dict[str, Any] = {}

    def param(self, param: Any) -> IterData:
        self._param = param
        return self

    def cost(self, cost: float) -> IterData:
        self._cost = float(cost)
        return self

    def grad(self, grad: Any) -> IterData:
        self._grad = grad
        return self

    def hessian(self, hessian: Any) -> IterData:
        self._hessian = hessian
        return self

    def kv(self, **pairs: Any) -> IterData:
        """Attach key/value annotations forwarded to observers."""
        self._kv.update(pairs)
        return self

    def get_param(self) -> Optional[Any]:
        return self._param

    def get_cost(self) -> Optional[float]:
        return self._cost

    def get_grad(self) -> Optional[Any]:
        return self._grad

    def get_hessian(self) -> Optional[Any]:
        return self._hessian

    def get_kv(self) -> dict[str, Any]:
        return dict(self._kv)

    def __repr__(self) -> str:
        present = [
            name
            for name, value in (
                ("param", self._param),
                ("cost", self._cost),
                ("grad", self._grad),
                ("hessian", self._hessian),
            )
            if value is not None
        ]
        return f"IterData({', '.join(present)})"


class IterState:
    """Mutable record of the progress of one run.

    Owned by exactly one executor. ``grad`` and ``hessian`` are only present
    once some step supplied them; :meth:`get_grad` and :meth:`get_hessian`
    raise :class:`ImpossibleStateError` when read before that.
    """

    def __init__(self, param: Any, max_iters: int) -> None:
        backend = get_backend(param)
        self.param = backend.copy(param)
        self.prev_param = backend.copy(param)
        self.best_param = backend.copy(param)
        self.prev_best_param = backend.copy(param)
        self.cost = math.inf
        self.prev_cost = math.inf
        self.best_cost = math.inf
        self.prev_best_cost = math.inf
        self.grad: Optional[Any] = None
        self.prev_grad: Optional[Any] = None
        self.hessian: Optional[Any] = None
        self.prev_hessian: Optional[Any] = None
        self.iter = 0
        self.last_best_iter = 0
        self.max_iters = max_iters
        self.termination_reason = TerminationReason.NOT_TERMINATED

    @property
    def has_grad(self) -> bool:
        return self.grad is not None

    @property
    def has_hessian(self) -> bool:
        return self.hessian is not None

    def get_param(self) -> Any:
        return self.param

    def get_cost(self) -> float:
        return self.cost

    def get_grad(self) -> Any:
        if self.grad is None:
            raise ImpossibleStateError("gradient requested before it was computed")
        return self.grad

    def get_grad_or_none(self) -> Optional[Any]:
        return self.grad

    def get_hessian(self) -> Any:
        if self.hessian is None:
            raise ImpossibleStateError("Hessian requested before it was computed")
        return self.hessian

    def get_hessian_or_none(self) -> Optional[Any]:
        return self.hessian

    def set_param(self, param: Any) -> None:
        self.prev_param = self.param
        self.param = param

    def set_cost(self, cost: float) -> None:
        self.prev_cost = self.cost
        self.cost = float(cost)

    def set_grad(self, grad: Any) -> None:
        self.prev_grad = self.grad
        self.grad = grad

    def set_hessian(self, hessian: Any) -> None:
        self.prev_hessian = self.hessian
        self.hessian = hessian

    def update(self, data: IterData) -> bool:
        """Merge the fields present in ``data``; return True on a new best."""
        param = data.get_param()
        cost = data.get_cost()
        grad = data.get_grad()
        hessian = data.get_hessian()
        if param is not None:
            self.set_param(param)
        if cost is not None:
            self.set_cost(cost)
        if grad is not None:
            self.set_grad(grad)
        if hessian is not None:
            self.set_hessian(hessian)

        if cost is not None and self.cost < self.best_cost:
            self.prev_best_param = self.best_param
            self.prev_best_cost = self.best_cost
            self.best_param = self.param
            self.best_cost = self.cost
            self.last_best_iter = self.iter
            return True
        return False

    def increment_iter(self) -> None:
        self.iter += 1

    def is_terminated(self) -> bool:
        return self.termination_reason.terminated

    def set_termination_reason(self, reason: TerminationReason) -> None:
        if self.is_terminated() and reason is not self.termination_reason:
            raise ImpossibleStateError(
                f"run already terminated with {self.termination_reason.name}"
            )
        self.termination_reason = reason

    def snapshot(self) -> IterState:
        """Return an independent copy handed to observers."""
        return copy.deepcopy(self)

    def __repr__(self) -> str:
        return (
            f"IterState(iter={self.iter}, cost={self.cost}, "
            f"best_cost={self.best_cost}, "
            f"termination_reason={self.termination_reason.name})"
        )


__all__ = ["IterData", "IterState", "TerminationReason"]
