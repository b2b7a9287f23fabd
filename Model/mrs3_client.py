# Model/mrs3_client.py
"""
HTTP client of the MRS3 backend.

Both endpoints take a multipart form and answer with a binary body on success.
Failures come back as non-2xx responses with a JSON body {"detail": "<message>"}.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import requests

from .annotations import Point, serialize_polygons
from .upload_policy import UploadFile

log = logging.getLogger(__name__)

COMPRESS_ENDPOINT = "compress"
RESTORE_ENDPOINT = "restore"

COMPRESS_FILENAME = "compressed-output.pkg"
RESTORE_FILENAME = "restored-image.png"

COMPRESS_FALLBACK = "An error occurred while compressing."
RESTORE_FALLBACK = "An error occurred while restoring."

VALID_SCALERS = (2, 3, 4)
MODE_EDSR = -1
MODE_OPENCV = 0
VALID_MODES = (MODE_EDSR, MODE_OPENCV)


class BackendError(Exception):
    # The backend answered, but not with a success status
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class ProcessingResult:
    data: bytes
    filename: str
    media_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)

    def save(self, path: str) -> None:
        with open(path, "wb") as f:
            f.write(self.data)


def error_detail(response: requests.Response, fallback: str) -> str:
    # FastAPI puts a list into "detail" for form validation errors - only plain strings are shown
    try:
        body: Any = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        detail = body.get("detail")
        if isinstance(detail, str) and detail:
            return detail
    return fallback


class MRS3Client:
    def __init__(self, base_url: str, *, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint}"

    def _post(self, endpoint: str, files: dict, data: dict, fallback: str) -> requests.Response:
        url = self._url(endpoint)
        log.info("[REQUEST] POST %s fields=%s", url, sorted(data))
        response = self.session.post(url, files=files, data=data, timeout=self.timeout)
        if not response.ok:
            message = error_detail(response, fallback)
            log.warning("[REQUEST] %s failed with HTTP %s: %s", url, response.status_code, message)
            raise BackendError(message, response.status_code)
        log.info("[REQUEST] %s -> %d bytes", url, len(response.content))
        return response

    def compress(self, image: UploadFile, polygons: Sequence[Sequence[Point]], scaler: int) -> ProcessingResult:
        if scaler not in VALID_SCALERS:
            raise ValueError(f"scaler must be one of {VALID_SCALERS}, got {scaler!r}")
        if not polygons:
            raise ValueError("at least one polygon is required")
        if image.path is None:
            raise ValueError(f"{image.name} has no file on disk")

        with open(image.path, "rb") as fh:
            response = self._post(
                COMPRESS_ENDPOINT,
                files={"image": (image.name, fh, image.mime_type or "application/octet-stream")},
                data={"polygons": serialize_polygons(polygons), "scaler": str(scaler)},
                fallback=COMPRESS_FALLBACK,
            )
        return ProcessingResult(response.content, COMPRESS_FILENAME, "application/octet-stream")

    def restore(self, package: UploadFile, mrs3_mode: int) -> ProcessingResult:
        if mrs3_mode not in VALID_MODES:
            raise ValueError(f"mrs3_mode must be one of {VALID_MODES}, got {mrs3_mode!r}")
        if package.path is None:
            raise ValueError(f"{package.name} has no file on disk")

        with open(package.path, "rb") as fh:
            response = self._post(
                RESTORE_ENDPOINT,
                files={"pkg": (package.name, fh, "application/octet-stream")},
                data={"mrs3_mode": str(mrs3_mode)},
                fallback=RESTORE_FALLBACK,
            )
        media_type = response.headers.get("Content-Type", "image/png").split(";")[0].strip() or "image/png"
        return ProcessingResult(response.content, RESTORE_FILENAME, media_type)
