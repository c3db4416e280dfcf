"""Order-preserving parallel processing with joblib."""

import logging
import os
from collections.abc import Callable, Sequence
from typing import Any

from joblib import Parallel, delayed
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from .config import MapperConfig

logger = logging.getLogger(__name__)


class ParallelProcessor:
    """
    Apply a function to every item of a batch, sequentially or with joblib.

    Results are always returned in input order.
    """

    def __init__(self, config: MapperConfig | None = None):
        self.config = config or MapperConfig()
        self.n_jobs = self.config.n_jobs if self.config.n_jobs > 0 else (os.cpu_count() or 1)

    def map(self, func: Callable, items: Sequence[Any], description: str = "Mapping") -> list[Any]:
        """Apply ``func(item)`` to each item."""
        return self._run(func, [(item,) for item in items], description)

    def starmap(
        self, func: Callable, items: Sequence[tuple], description: str = "Mapping"
    ) -> list[Any]:
        """Apply ``func(*args)`` to each argument tuple."""
        return self._run(func, list(items), description)

    def _run(self, func: Callable, arg_tuples: list[tuple], description: str) -> list[Any]:
        if self.config.is_sequential:
            calls = (func(*args) for args in arg_tuples)
        else:
            logger.debug(
                "Running %d items on %d %s jobs", len(arg_tuples), self.n_jobs, self.config.backend
            )
            parallel = Parallel(n_jobs=self.n_jobs, backend=self.config.backend, return_as="generator")
            calls = parallel(delayed(func)(*args) for args in arg_tuples)

        if not self.config.show_progress:
            return list(calls)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
        ) as progress:
            task = progress.add_task(f"[cyan]{description}...", total=len(arg_tuples))
            results = []
            for result in calls:
                results.append(result)
                progress.update(task, advance=1)
            return results
