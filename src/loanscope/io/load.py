from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

import pandas as pd

from loanscope.config import ColumnsConfig
from loanscope.io.read import load_raw_dataset

LOGGER = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Unable to load the loan eligibility dataset. Please refresh the page."


class CancellationToken:
    """Marks whether the consumer of a pending load is still interested in it."""

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


@dataclass(frozen=True)
class LoadOutcome:
    rows: pd.DataFrame | None = None
    error: str | None = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return not self.cancelled and self.error is None and self.rows is not None


async def load_raw_dataset_async(
    csv_path: Path,
    columns: ColumnsConfig,
    token: CancellationToken,
) -> LoadOutcome:
    """Read the dataset off the event loop and report a single outcome.

    The token is checked once the read settles; a cancelled load reports
    ``cancelled=True`` and carries neither rows nor an error.
    """
    try:
        rows = await asyncio.to_thread(load_raw_dataset, csv_path, columns)
    except (OSError, ValueError):
        if token.cancelled:
            LOGGER.debug("Discarding failed load of %s after cancellation", csv_path)
            return LoadOutcome(cancelled=True)
        LOGGER.exception("Failed loading dataset from %s", csv_path)
        return LoadOutcome(error=LOAD_ERROR_MESSAGE)

    if token.cancelled:
        LOGGER.debug("Discarding load of %s after cancellation", csv_path)
        return LoadOutcome(cancelled=True)
    return LoadOutcome(rows=rows)
