"""Upload session state and its reducer.

The front-end keeps one ``SessionState`` and replaces it with
``reduce(state, event)``. The dataset is only ever published by
``UploadSucceeded``, after parsing has finished.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Union

from core.config import DEFAULT_SETTINGS, DashboardSettings
from core.data import IngestError, UploadLike, ingest
from core.models import EMPTY_DATASET, Dataset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionState:
    dataset: Dataset = EMPTY_DATASET
    error: Optional[IngestError] = None
    filename: str = ""
    is_loading: bool = False

    @property
    def can_upload(self) -> bool:
        return not self.is_loading

    @property
    def has_data(self) -> bool:
        return bool(self.dataset)


@dataclass(frozen=True)
class UploadStarted:
    pass


@dataclass(frozen=True)
class UploadSucceeded:
    dataset: Dataset
    filename: str


@dataclass(frozen=True)
class UploadFailed:
    error: IngestError


Event = Union[UploadStarted, UploadSucceeded, UploadFailed]


def reduce(state: SessionState, event: Event) -> SessionState:
    if isinstance(event, UploadStarted):
        if state.is_loading:
            logger.warning("upload started while another is in flight; ignoring")
            return state
        # clear before validate: a failed upload never leaves the old dataset behind
        return SessionState(is_loading=True)
    if isinstance(event, UploadSucceeded):
        return replace(state, dataset=event.dataset, error=None, filename=event.filename, is_loading=False)
    if isinstance(event, UploadFailed):
        return replace(state, dataset=EMPTY_DATASET, error=event.error, filename="", is_loading=False)
    raise TypeError(f"unknown session event: {event!r}")


def upload(state: SessionState, file: Optional[UploadLike], settings: DashboardSettings = DEFAULT_SETTINGS) -> SessionState:
    if not state.can_upload:
        logger.warning("upload rejected: previous upload still loading")
        return state

    state = reduce(state, UploadStarted())
    result = ingest(file, settings)
    if result.ok:
        return reduce(state, UploadSucceeded(dataset=result.dataset, filename=str(file.name)))  # type: ignore[arg-type,union-attr]
    return reduce(state, UploadFailed(error=result.error))  # type: ignore[arg-type]
