import json
import logging
from io import StringIO

import numpy as np
import pytest
import torch

from optloop import (
    Executor,
    Landweber,
    LoggingObserver,
    ObserverMode,
    Problem,
    WriteToFile,
    WriteToFileSerializer,
)
from optloop.logging import configure_logging


def counting_problem():
    return Problem(fun=lambda x: float(x @ x), grad=lambda x: 2 * x)


class CostingLandweber(Landweber):
    """Landweber that also reports the cost, so best-iterate tracking applies."""

    def next_iter(self, op, state):
        data = super().next_iter(op, state)
        return data.cost(op.apply(data.get_param()))


def test_write_to_file_json(tmp_path):
    observer = WriteToFile(tmp_path / "out", prefix="x")
    Executor(counting_problem(), CostingLandweber(0.1), np.ones(2), max_iters=6).add_observer(
        observer, ObserverMode.every(3)
    ).run()
    files = sorted(p.name for p in (tmp_path / "out").iterdir())
    assert files == ["x_3.json", "x_6.json"]
    with open(tmp_path / "out" / "x_3.json", encoding="utf-8") as f:
        payload = json.load(f)
    assert payload["iter"] == 3
    assert np.allclose(payload["param"], [0.512, 0.512])
    assert payload["cost"] == pytest.approx(2 * 0.512**2)


def test_write_to_file_npy_with_torch_param(tmp_path):
    observer = WriteToFile(tmp_path, serializer=WriteToFileSerializer.NPY)
    problem = Problem(fun=lambda x: float(x @ x), grad=lambda x: 2 * x)
    Executor(
        problem, Landweber(0.25), torch.tensor([2.0, -2.0], dtype=torch.float64), max_iters=1
    ).add_observer(observer).run()
    saved = np.load(tmp_path / "param_1.npy")
    assert np.allclose(saved, [1.0, -1.0])


def test_new_best_writes_only_improvements(tmp_path):
    observer = WriteToFile(tmp_path)
    Executor(counting_problem(), CostingLandweber(0.1), np.ones(1), max_iters=3).add_observer(
        observer, ObserverMode.NEW_BEST
    ).run()
    assert len(list(tmp_path.iterdir())) == 3


def test_logging_observer_lines():
    observer = LoggingObserver()
    stream = StringIO()
    configure_logging(level=logging.INFO, stream=stream)
    Executor(counting_problem(), CostingLandweber(0.1), np.ones(1), max_iters=2).add_observer(
        observer
    ).run()
    err = stream.getvalue()
    assert "optloop.observer: Landweber" in err
    assert "iter: 1, cost: 6.400000e-01" in err
    assert "iter: 2" in err
