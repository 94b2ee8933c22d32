"""
Column-parallel batch driver.
"""

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import List, Optional, Sequence

from specrad.atmosphere.state import Column
from specrad.core.logging_config import get_logger
from specrad.radiation.radiation import Radiation

logger = get_logger("radiation.batch")


@dataclass
class ColumnResult:
    """Outcome of one column in a batch run."""

    column_index: int
    ok: bool
    error: Optional[str] = None


def _run_columns(
    radiation: Radiation,
    columns: Sequence[Column],
    mode: str,
    n_workers: Optional[int],
) -> List[ColumnResult]:
    if not columns:
        return []
    if len(columns) > radiation.ncol:
        raise ValueError(
            f"{len(columns)} columns given but Radiation holds {radiation.ncol}"
        )

    if n_workers is None:
        n_workers = os.cpu_count() or 1

    logger.info(f"Computing {mode} for {len(columns)} columns with {n_workers} workers")

    def clear(worker: Radiation, index: int) -> None:
        if mode == "flux":
            worker.flxup[:, index] = 0.0
            worker.flxdn[:, index] = 0.0
        else:
            worker.radiance[:, index] = 0.0

    def task(index: int, column: Column) -> None:
        worker = radiation.spawn_worker()
        clear(worker, index)
        try:
            if mode == "flux":
                worker.cal_flux(column, index)
            else:
                worker.cal_radiance(column, index)
        except Exception:
            # A failed column keeps a zeroed row
            clear(worker, index)
            raise

    completed = {}
    with ThreadPoolExecutor(max_workers=n_workers) as executor:
        futures = {executor.submit(task, i, col): i for i, col in enumerate(columns)}

        for future in as_completed(futures):
            idx = futures[future]
            try:
                future.result()
                completed[idx] = ColumnResult(idx, True)
            except Exception as e:
                logger.error(f"Error computing {mode} for column {idx}: {e}")
                completed[idx] = ColumnResult(idx, False, str(e))

    results = [completed[i] for i in range(len(columns))]
    failed = sum(1 for r in results if not r.ok)
    logger.info(f"Completed {mode} batch: {len(results) - failed} ok, {failed} failed")
    return results


def compute_flux_columns(
    radiation: Radiation, columns: Sequence[Column], n_workers: Optional[int] = None
) -> List[ColumnResult]:
    """
    Compute fluxes for many columns in parallel.

    Column ``i`` of ``columns`` is written to output row ``i``. Each task
    works on its own :meth:`Radiation.spawn_worker` clone; a failed column
    keeps a zeroed row and is reported in the result list.

    Parameters
    ----------
    radiation : Radiation
        Container whose output arrays receive the results
    columns : sequence of Column
        Columns to process
    n_workers : int, optional
        Number of worker threads. If None, uses CPU count.

    Returns
    -------
    List[ColumnResult]
        One result per column, in input order
    """
    return _run_columns(radiation, columns, "flux", n_workers)


def compute_radiance_columns(
    radiation: Radiation, columns: Sequence[Column], n_workers: Optional[int] = None
) -> List[ColumnResult]:
    """Compute TOA radiances for many columns in parallel (see ``compute_flux_columns``)."""
    return _run_columns(radiation, columns, "radiance", n_workers)
