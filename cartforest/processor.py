"""Evaluate every model of an ensemble on a single input.

Both processors return ``result[i] == ensemble[i].predict(vector)``. The
parallel processor bisects the index range recursively on a thread pool until
a range is small enough to evaluate in place; every task writes its
predictions straight into a pre-sized array at the models' own indices, so the
output order never depends on completion order.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from typing import Protocol, Sequence

import numpy as np

from .data import ensure_numpy
from .errors import InvalidConfiguration, InvalidInput
from .model import Model

EXECUTION_CUT_OFF = 0.05
MAX_WORKERS_ENV = "CARTFOREST_MAX_WORKERS"

logger = logging.getLogger(__name__)


class EnsembleModelProcessor(Protocol):
    def predictions(self, ensemble: Sequence[Model], vector: Sequence[float]) -> np.ndarray:
        ...


def _query(vector: Sequence[float] | None) -> np.ndarray:
    if vector is None:
        raise InvalidInput("query vector must not be None")
    arr = ensure_numpy(vector)
    if arr.ndim != 1 or arr.size == 0:
        raise InvalidInput("query must be a non-empty 1-D vector")
    return arr


def resolve_max_workers(max_workers: int | None = None) -> int:
    """Pool size from ``max_workers``, else ``CARTFOREST_MAX_WORKERS``, else the CPU count."""
    if max_workers is None:
        env_value = os.getenv(MAX_WORKERS_ENV)
        if env_value:
            try:
                max_workers = int(env_value)
            except ValueError as exc:
                raise InvalidConfiguration(f"{MAX_WORKERS_ENV} must be an integer, got {env_value!r}") from exc
        else:
            max_workers = os.cpu_count() or 1
    if max_workers < 1:
        raise InvalidConfiguration(f"max_workers must be at least 1, got {max_workers}")
    return max_workers


class SequentialProcessor:
    """Evaluate the models one after another on the calling thread."""

    def predictions(self, ensemble: Sequence[Model], vector: Sequence[float]) -> np.ndarray:
        x = _query(vector)
        models = tuple(ensemble)
        results = np.empty(len(models), dtype=np.float64)
        for index, model in enumerate(models):
            results[index] = model.predict(x)
        return results


class _ModelEvaluation:
    """Fork/join evaluation of ``models[lo:hi]`` into ``results[lo:hi]``."""

    def __init__(
        self,
        models: tuple[Model, ...],
        vector: np.ndarray,
        results: np.ndarray,
        leaf_size: float,
        executor: Executor,
    ) -> None:
        self.models = models
        self.vector = vector
        self.results = results
        self.leaf_size = leaf_size
        self.executor = executor

    def compute(self, lo: int, hi: int) -> None:
        if hi - lo <= self.leaf_size:
            for m in range(lo, hi):
                self.results[m] = self.models[m].predict(self.vector)
            return

        mid = lo + (hi - lo) // 2
        upper = self.executor.submit(self.compute, mid, hi)
        try:
            self.compute(lo, mid)
        except BaseException:
            # no task may outlive the failed call
            upper.cancel()
            wait([upper])
            raise
        self._join(upper, mid, hi)

    def _join(self, forked: Future, lo: int, hi: int) -> None:
        # a half nobody picked up yet is run here rather than waited for
        if forked.cancel():
            self.compute(lo, hi)
        else:
            forked.result()


class ParallelProcessor:
    """Evaluate the models concurrently with recursive fork/join decomposition.

    Parameters
    ----------
    executor:
        Pool the tasks run on. It is used as given and never shut down by the
        processor. When omitted the processor owns a thread pool which is
        released by :meth:`close`.
    max_workers:
        Size of the owned pool; defaults to ``CARTFOREST_MAX_WORKERS`` or the
        CPU count. Only valid without ``executor``.
    cutoff:
        Fraction of the ensemble size at or below which a range is evaluated
        in place instead of being split further.
    """

    def __init__(
        self,
        executor: Executor | None = None,
        *,
        max_workers: int | None = None,
        cutoff: float = EXECUTION_CUT_OFF,
    ) -> None:
        if not (0.0 < cutoff <= 1.0):
            raise InvalidConfiguration(f"cutoff must lie in (0, 1], got {cutoff}")
        if executor is not None and max_workers is not None:
            raise InvalidConfiguration("pass either an executor or max_workers, not both")
        self.cutoff = float(cutoff)
        self._owns_executor = executor is None
        if executor is None:
            workers = resolve_max_workers(max_workers)
            executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="cartforest")
            logger.debug("started a %d-thread evaluation pool", workers)
        self._executor = executor

    @property
    def executor(self) -> Executor:
        return self._executor

    def predictions(self, ensemble: Sequence[Model], vector: Sequence[float]) -> np.ndarray:
        x = _query(vector)
        models = tuple(ensemble)
        results = np.empty(len(models), dtype=np.float64)
        if not models:
            return results
        leaf_size = max(1.0, self.cutoff * len(models))
        task = _ModelEvaluation(models, x, results, leaf_size, self._executor)
        task.compute(0, len(models))
        return results

    def close(self) -> None:
        """Release the owned pool; an injected executor is left running."""
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def __enter__(self) -> "ParallelProcessor":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = [
    "EXECUTION_CUT_OFF",
    "EnsembleModelProcessor",
    "MAX_WORKERS_ENV",
    "ParallelProcessor",
    "SequentialProcessor",
    "resolve_max_workers",
]
