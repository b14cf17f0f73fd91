"""Array capability interface used by every solver.

Solvers never call NumPy or PyTorch directly. They ask :func:`get_backend`
for the backend matching the parameter they were given and express their
update rules through the small set of vector/matrix operations below, so the
same solver runs on ``numpy.ndarray`` and ``torch.Tensor`` parameters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import numpy as np
import torch

from .errors import NumericalFailureError


class ArrayBackend(ABC):
    """Vector and matrix operations a parameter/Hessian type must support."""

    name: str = "abstract"

    @abstractmethod
    def copy(self, x: Any) -> Any:
        ...

    def add(self, a: Any, b: Any) -> Any:
        return a + b

    def sub(self, a: Any, b: Any) -> Any:
        return a - b

    def scale(self, a: Any, alpha: float) -> Any:
        return a * alpha

    def scaled_add(self, a: Any, alpha: float, b: Any) -> Any:
        """Return ``a + alpha * b``."""
        return a + alpha * b

    def scaled_sub(self, a: Any, alpha: float, b: Any) -> Any:
        """Return ``a - alpha * b``."""
        return a - alpha * b

    @abstractmethod
    def dot(self, a: Any, b: Any) -> float:
        ...

    @abstractmethod
    def norm(self, a: Any) -> float:
        ...

    def mat_vec(self, m: Any, v: Any) -> Any:
        return m @ v

    def mat_mul(self, a: Any, b: Any) -> Any:
        return a @ b

    @abstractmethod
    def outer(self, a: Any, b: Any) -> Any:
        ...

    def transpose(self, m: Any) -> Any:
        return m.T

    @abstractmethod
    def eye_like(self, m: Any) -> Any:
        ...

    @abstractmethod
    def inv(self, m: Any) -> Any:
        """Invert ``m``; raises :class:`NumericalFailureError` when singular."""

    def weighted_dot(self, a: Any, m: Any, b: Any) -> float:
        """Return ``a^T m b``."""
        return self.dot(a, self.mat_vec(m, b))

    @abstractmethod
    def to_list(self, x: Any) -> Any:
        ...

    @abstractmethod
    def is_finite(self, x: Any) -> bool:
        ...


class NumpyBackend(ArrayBackend):
    """Backend for ``numpy.ndarray`` (and anything ``np.asarray`` accepts)."""

    name = "numpy"

    def copy(self, x: Any) -> np.ndarray:
        return np.array(x, dtype=float, copy=True)

    def scale(self, a: Any, alpha: float) -> np.ndarray:
        return np.asarray(a, dtype=float) * alpha

    def scaled_add(self, a: Any, alpha: float, b: Any) -> np.ndarray:
        return np.asarray(a, dtype=float) + alpha * np.asarray(b, dtype=float)

    def scaled_sub(self, a: Any, alpha: float, b: Any) -> np.ndarray:
        return np.asarray(a, dtype=float) - alpha * np.asarray(b, dtype=float)

    def dot(self, a: Any, b: Any) -> float:
        return float(np.dot(a, b))

    def norm(self, a: Any) -> float:
        return float(np.linalg.norm(a))

    def outer(self, a: Any, b: Any) -> np.ndarray:
        return np.outer(a, b)

    def eye_like(self, m: Any) -> np.ndarray:
        return np.eye(np.shape(m)[0])

    def inv(self, m: Any) -> np.ndarray:
        try:
            return np.linalg.inv(m)
        except np.linalg.LinAlgError as exc:
            raise NumericalFailureError(f"matrix inversion failed: {exc}") from exc

    def to_list(self, x: Any) -> Any:
        return np.asarray(x).tolist()

    def is_finite(self, x: Any) -> bool:
        return bool(np.all(np.isfinite(x)))


class TorchBackend(ArrayBackend):
    """Backend for ``torch.Tensor`` parameters; results stay on the input device."""

    name = "torch"

    def copy(self, x: torch.Tensor) -> torch.Tensor:
        return x.detach().clone()

    def dot(self, a: torch.Tensor, b: torch.Tensor) -> float:
        return float(torch.dot(a.reshape(-1), b.reshape(-1)).item())

    def norm(self, a: torch.Tensor) -> float:
        return float(torch.linalg.vector_norm(a).item())

    def outer(self, a: torch.Tensor, b: torch.Tensor) -> torch.Tensor:
        return torch.outer(a, b)

    def eye_like(self, m: torch.Tensor) -> torch.Tensor:
        return torch.eye(m.shape[0], dtype=m.dtype, device=m.device)

    def inv(self, m: torch.Tensor) -> torch.Tensor:
        try:
            return torch.linalg.inv(m)
        except torch.linalg.LinAlgError as exc:
            raise NumericalFailureError(f"matrix inversion failed: {exc}") from exc

    def to_list(self, x: torch.Tensor) -> Any:
        return x.detach().cpu().tolist()

    def is_finite(self, x: torch.Tensor) -> bool:
        return bool(torch.isfinite(x).all().item())


_NUMPY = NumpyBackend()
_TORCH = TorchBackend()


def get_backend(value: Any) -> ArrayBackend:
    """Return the backend able to operate on ``value``."""
    if isinstance(value, torch.Tensor):
        return _TORCH
    return _NUMPY


__all__ = ["ArrayBackend", "NumpyBackend", "TorchBackend", "get_backend"]
