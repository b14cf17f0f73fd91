"""Observers receive read-only snapshots of the iteration state.

Observers are side-effect sinks: the executor calls them synchronously after
each merge and ignores what they return.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import numpy as np

from .backend import get_backend
from .errors import InvalidParameterError
from .logging import get_logger
from .state import IterState


class Observer(ABC):
    """Interface for anything that watches a run."""

    def observe_init(self, name: str, kv: dict[str, Any]) -> None:
        """Called once after the solver has been initialized."""

    @abstractmethod
    def observe_iter(self, state: IterState, kv: dict[str, Any]) -> None:
        """Called after an iteration, as selected by the observer's mode."""


@dataclass(frozen=True)
class ObserverMode:
    """When an observer is invoked.

    Use the constants ``ALWAYS``, ``NEVER`` and ``NEW_BEST`` or
    ``ObserverMode.every(n)``.
    """

    kind: str
    n: int = 1

    @classmethod
    def every(cls, n: int) -> ObserverMode:
        if n < 1:
            raise InvalidParameterError("observer interval must be at least 1")
        return cls("every", n)

    def should_observe(self, iteration: int, new_best: bool) -> bool:
        if self.kind == "always":
            return True
        if self.kind == "every":
            return iteration % self.n == 0
        if self.kind == "new_best":
            return new_best
        return False


ObserverMode.ALWAYS = ObserverMode("always")
ObserverMode.NEVER = ObserverMode("never")
ObserverMode.NEW_BEST = ObserverMode("new_best")


class Observers:
    """Collection of observers together with their modes."""

    def __init__(self) -> None:
        self._observers: list[tuple[Observer, ObserverMode]] = []

    def push(self, observer: Observer, mode: ObserverMode) -> None:
        self._observers.append((observer, mode))

    def is_empty(self) -> bool:
        return not self._observers

    def __len__(self) -> int:
        return len(self._observers)

    def observe_init(self, name: str, kv: dict[str, Any]) -> None:
        for observer, mode in self._observers:
            if mode.kind != "never":
                observer.observe_init(name, kv)

    def observe_iter(self, state: IterState, kv: dict[str, Any], new_best: bool) -> None:
        selected = [
            observer
            for observer, mode in self._observers
            if mode.should_observe(state.iter, new_best)
        ]
        if not selected:
            return
        snapshot = state.snapshot()
        for observer in selected:
            observer.observe_iter(snapshot, kv)


class LoggingObserver(Observer):
    """Writes one line per observed iteration to the optloop logger."""

    def __init__(self, name: str = "observer", level: int = logging.INFO) -> None:
        self.logger = get_logger(name)
        self.level = level

    def observe_init(self, name: str, kv: dict[str, Any]) -> None:
        extra = "".join(f", {key}: {value}" for key, value in kv.items())
        self.logger.log(self.level, "%s%s", name, extra)

    def observe_iter(self, state: IterState, kv: dict[str, Any]) -> None:
        extra = "".join(f", {key}: {value}" for key, value in kv.items())
        self.logger.log(
            self.level,
            "iter: %d, cost: %.6e, best_cost: %.6e%s",
            state.iter,
            state.cost,
            state.best_cost,
            extra,
        )


class WriteToFileSerializer(Enum):
    JSON = "json"
    NPY = "npy"


class WriteToFile(Observer):
    """Writes the current parameter of every observed iteration to ``directory``.

    Files are named ``{prefix}_{iter}.json`` or ``{prefix}_{iter}.npy``.
    """

    def __init__(
        self,
        directory: str | Path,
        prefix: str = "param",
        serializer: WriteToFileSerializer = WriteToFileSerializer.JSON,
    ) -> None:
        self.directory = Path(directory)
        self.prefix = prefix
        self.serializer = serializer

    def observe_iter(self, state: IterState, kv: dict[str, Any]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        values = get_backend(state.param).to_list(state.param)
        path = self.directory / f"{self.prefix}_{state.iter}.{self.serializer.value}"
        if self.serializer is WriteToFileSerializer.JSON:
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"iter": state.iter, "cost": state.cost, "param": values}, f)
        else:
            np.save(path, np.asarray(values, dtype=float))


__all__ = [
    "LoggingObserver",
    "Observer",
    "ObserverMode",
    "Observers",
    "WriteToFile",
    "WriteToFileSerializer",
]
