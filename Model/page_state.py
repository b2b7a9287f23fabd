# Model/page_state.py
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Optional

import requests

from .annotations import Point
from .mrs3_client import MODE_EDSR, BackendError, ProcessingResult
from .upload_policy import UploadFile

log = logging.getLogger(__name__)

UNKNOWN_ERROR = "An unknown error occurred."


class PageStatus(Enum):
    NO_FILE = auto()
    FILE_SELECTED = auto()
    PROCESSING = auto()
    RESULT = auto()
    ERROR = auto()


@dataclass(frozen=True)
class RequestOutcome:
    result: Optional[ProcessingResult] = None
    error: Optional[str] = None


def run_request(call: Callable[[], ProcessingResult], fallback: str = UNKNOWN_ERROR) -> RequestOutcome:
    """
    Runs one backend call and turns whatever happens into an outcome. Never raises,
    so it can run inside a worker thread without anything escaping the page.
    """
    try:
        result = call()
    except BackendError as e:
        return RequestOutcome(error=e.message or fallback)
    except requests.RequestException as e:
        log.error("[REQUEST] network error: %r", e)
        return RequestOutcome(error=UNKNOWN_ERROR)
    except Exception:
        log.exception("[REQUEST] unexpected error")
        return RequestOutcome(error=UNKNOWN_ERROR)
    return RequestOutcome(result=result)


@dataclass
class PageState:
    upload: Optional[UploadFile] = None
    processing: bool = False
    result: Optional[ProcessingResult] = None
    error: Optional[str] = None
    version: int = 0  # bumped on every replacement / release, old request results are dropped

    @property
    def status(self) -> PageStatus:
        if self.processing:
            return PageStatus.PROCESSING
        if self.error:
            return PageStatus.ERROR
        if self.result is not None:
            return PageStatus.RESULT
        if self.upload is not None:
            return PageStatus.FILE_SELECTED
        return PageStatus.NO_FILE

    def can_submit(self) -> bool:
        return self.upload is not None and not self.processing

    def select_file(self, upload: UploadFile) -> None:
        # A new input invalidates everything derived from the old one
        self._clear_derived()
        self.upload = upload
        self.error = None
        self.version += 1

    def reject_file(self, message: str) -> None:
        self._clear_derived()
        self.upload = None
        self.error = message
        self.version += 1

    def begin_processing(self) -> bool:
        if not self.can_submit():
            return False
        self.processing = True
        self.error = None
        self.result = None
        return True

    def settle(self, outcome: RequestOutcome) -> None:
        self.processing = False
        if outcome.error is not None:
            self.error = outcome.error
            self.result = None
        else:
            self.error = None
            self.result = outcome.result

    def release(self) -> None:
        self._clear_derived()
        self.upload = None
        self.error = None
        self.version += 1

    def _clear_derived(self) -> None:
        # an outstanding request belongs to the old input, its answer is dropped via version
        self.processing = False
        self.result = None


@dataclass
class DownscaleState(PageState):
    polygons: list[list[Point]] = field(default_factory=list)
    scaler: int = 2

    def can_submit(self) -> bool:
        return super().can_submit() and len(self.polygons) > 0

    def set_polygons(self, polygons: list[list[Point]]) -> None:
        # Always the complete collection, never a delta
        self.polygons = [list(p) for p in polygons]

    def _clear_derived(self) -> None:
        super()._clear_derived()
        self.polygons = []


@dataclass
class RestoreState(PageState):
    mrs3_mode: int = MODE_EDSR
