"""Operators (cost functions) and the evaluation-counting wrapper."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from .errors import ImpossibleStateError, NotImplementedOperatorError

Param = Any
Objective = Callable[[Param], float]
Gradient = Callable[[Param], Param]
Hessian = Callable[[Param], Any]
Jacobian = Callable[[Param], Any]


class Operator:
    """Base class for user-defined cost functions.

    Subclasses override the capabilities they provide. Every capability that
    is not overridden raises :class:`NotImplementedOperatorError`; nothing is
    ever approximated silently.
    """

    def apply(self, param: Param) -> float:
        raise NotImplementedOperatorError(
            f"{type(self).__name__} does not implement apply"
        )

    def gradient(self, param: Param) -> Param:
        raise NotImplementedOperatorError(
            f"{type(self).__name__} does not implement gradient"
        )

    def hessian(self, param: Param) -> Any:
        raise NotImplementedOperatorError(
            f"{type(self).__name__} does not implement hessian"
        )

    def jacobian(self, param: Param) -> Any:
        raise NotImplementedOperatorError(
            f"{type(self).__name__} does not implement jacobian"
        )


@dataclass(frozen=True)
class Problem(Operator):
    """Operator assembled from plain callables."""

    fun: Objective
    grad: Optional[Gradient] = None
    hess: Optional[Hessian] = None
    jac: Optional[Jacobian] = None

    def apply(self, param: Param) -> float:
        return self.fun(param)

    def gradient(self, param: Param) -> Param:
        if self.grad is None:
            return super().gradient(param)
        return self.grad(param)

    def hessian(self, param: Param) -> Any:
        if self.hess is None:
            return super().hessian(param)
        return self.hess(param)

    def jacobian(self, param: Param) -> Any:
        if self.jac is None:
            return super().jacobian(param)
        return self.jac(param)


class OpWrapper(Operator):
    """Counts every call made to the wrapped operator.

    Nested runs (line searches, trust-region subproblems) work on a fresh
    wrapper obtained from :meth:`new_from`; once the nested run has finished
    the owning solver merges its counts back with :meth:`consume`.
    """

    def __init__(self, op: Operator) -> None:
        if isinstance(op, OpWrapper):
            raise ImpossibleStateError("refusing to wrap an OpWrapper twice")
        self.op: Optional[Operator] = op
        self.cost_count = 0
        self.grad_count = 0
        self.hessian_count = 0
        self.jacobian_count = 0

    @classmethod
    def new_from(cls, other: OpWrapper | Operator) -> OpWrapper:
        """Return a wrapper with zeroed counters around the same operator."""
        if isinstance(other, OpWrapper):
            return cls(other._inner())
        return cls(other)

    def _inner(self) -> Operator:
        if self.op is None:
            raise ImpossibleStateError("operator wrapper has already been consumed")
        return self.op

    def apply(self, param: Param) -> float:
        op = self._inner()
        self.cost_count += 1
        return op.apply(param)

    def gradient(self, param: Param) -> Param:
        op = self._inner()
        self.grad_count += 1
        return op.gradient(param)

    def hessian(self, param: Param) -> Any:
        op = self._inner()
        self.hessian_count += 1
        return op.hessian(param)

    def jacobian(self, param: Param) -> Any:
        op = self._inner()
        self.jacobian_count += 1
        return op.jacobian(param)

    def consume(self, other: OpWrapper) -> None:
        """Add the counts of ``other`` to this wrapper and discard its operator."""
        if other is self:
            raise ImpossibleStateError("an operator wrapper cannot consume itself")
        other._inner()
        self.cost_count += other.cost_count
        self.grad_count += other.grad_count
        self.hessian_count += other.hessian_count
        self.jacobian_count += other.jacobian_count
        other.op = None

    def counts(self) -> dict[str, int]:
        return {
            "cost": self.cost_count,
            "gradient": self.grad_count,
            "hessian": self.hessian_count,
            "jacobian": self.jacobian_count,
        }

    def get_op(self) -> Operator:
        """Return the wrapped operator."""
        return self._inner()

    def __repr__(self) -> str:
        return f"OpWrapper(op={self.op!r}, counts={self.counts()})"


__all__ = [
    "Gradient",
    "Hessian",
    "Jacobian",
    "Objective",
    "OpWrapper",
    "Operator",
    "Param",
    "Problem",
]
