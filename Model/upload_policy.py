# Model/upload_policy.py
from __future__ import annotations
import mimetypes
import os
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from .annotations import round_half_up

MB = 1024 * 1024
IMAGE_ACCEPT = "image/*"
PACKAGE_ACCEPT = ".pkg"
DEFAULT_MAX_SIZE = 10 * MB


@dataclass(frozen=True)
class UploadFile:
    name: str
    size: int
    mime_type: str = ""
    path: Optional[str] = None

    @classmethod
    def from_path(cls, path: str) -> "UploadFile":
        name = os.path.basename(path)
        mime, _ = mimetypes.guess_type(name)
        return cls(name=name, size=os.path.getsize(path), mime_type=mime or "", path=path)


class ValidationReason(Enum):
    WRONG_TYPE = auto()
    WRONG_EXTENSION = auto()
    TOO_LARGE = auto()


@dataclass(frozen=True)
class ValidationError:
    reason: ValidationReason
    message: str


def _accept_entries(accept: str) -> list[str]:
    return [a.strip() for a in accept.split(",") if a.strip()]


def _size_mb(max_size: int) -> int:
    return round_half_up(max_size / MB)


def validate(file: UploadFile, accept: str, max_size: int) -> Optional[ValidationError]:
    """
    Checks a picked file against the accept pattern and the size limit.
    Order: MIME wildcard ("image/*"), extension (".pkg"), size. The first failure is returned,
    None means the file may be taken over by the page.
    """
    entries = _accept_entries(accept)
    wildcards = [a for a in entries if a.endswith("/*")]
    extensions = [a for a in entries if a.startswith(".")]
    exact_types = [a for a in entries if "/" in a and not a.endswith("/*")]

    by_type = any(file.mime_type.startswith(w[:-1]) for w in wildcards) or file.mime_type in exact_types
    by_ext = any(file.name.endswith(ext) for ext in extensions)

    # (a) MIME wildcard - only decisive if no extension of the same pattern matched the name
    if wildcards and not (by_type or by_ext):
        kinds = ", ".join(w.split("/")[0] for w in wildcards)
        return ValidationError(ValidationReason.WRONG_TYPE, f"Only {kinds} files can be uploaded.")

    # (b) extension, the file name has to end with it exactly
    if extensions and not (by_ext or by_type):
        return ValidationError(ValidationReason.WRONG_EXTENSION,
                               f"Only {', '.join(extensions)} files can be uploaded.")

    # (c) size, regardless of the type
    if file.size > max_size:
        return ValidationError(ValidationReason.TOO_LARGE,
                               f"File is too large. Please choose a file of {_size_mb(max_size)}MB or less.")
    return None


@dataclass(frozen=True)
class UploadPolicy:
    accept: str = IMAGE_ACCEPT
    max_size: int = DEFAULT_MAX_SIZE
    label: Optional[str] = None  # replaces the default title of the drop area

    def validate(self, file: UploadFile) -> Optional[ValidationError]:
        return validate(file, self.accept, self.max_size)

    @property
    def is_image(self) -> bool:
        return any(a.startswith("image/") for a in _accept_entries(self.accept))

    def file_dialog_filter(self) -> str:
        # Filter string for QFileDialog
        if self.is_image:
            return "Images (*.png *.jpg *.jpeg *.gif *.bmp *.webp *.tif *.tiff);;All files (*)"
        patterns = " ".join(f"*{a}" for a in _accept_entries(self.accept) if a.startswith("."))
        return f"Package files ({patterns});;All files (*)"

    def describe(self) -> tuple[str, str]:
        # (title, subtitle) shown in the drop area
        mb = _size_mb(self.max_size)
        if self.is_image:
            title = "Drop an image here or click to choose one"
            subtitle = f"PNG, JPG, GIF formats supported (max {mb}MB)"
        else:
            title = "Drop a PKG file here or click to choose one"
            subtitle = f"Only compressed .pkg files supported (max {mb}MB)"
        return self.label or title, subtitle
