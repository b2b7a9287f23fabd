# Model/config.py
from __future__ import annotations
import os
from dataclasses import dataclass, field, replace
from typing import Mapping, Optional

from .upload_policy import DEFAULT_MAX_SIZE, IMAGE_ACCEPT, MB, PACKAGE_ACCEPT, UploadPolicy

DEFAULT_API_BASE_URL = "http://localhost:8000"
DEFAULT_TIMEOUT = 300.0  # seconds, EDSR restoration of large packages is slow

# (label, value) pairs for the option selectors
SCALER_OPTIONS: tuple[tuple[str, int], ...] = (("2x", 2), ("3x", 3), ("4x", 4))
RESTORE_MODE_OPTIONS: tuple[tuple[str, int], ...] = (
    ("EDSR (high quality AI upscaling)", -1),
    ("OpenCV", 0),
)


@dataclass(frozen=True)
class AppConfig:
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: Optional[float] = DEFAULT_TIMEOUT  # None: wait forever
    image_policy: UploadPolicy = field(default_factory=lambda: UploadPolicy(IMAGE_ACCEPT, DEFAULT_MAX_SIZE))
    package_policy: UploadPolicy = field(default_factory=lambda: UploadPolicy(PACKAGE_ACCEPT, DEFAULT_MAX_SIZE))
    scaler_options: tuple[tuple[str, int], ...] = SCALER_OPTIONS
    default_scaler: int = 2
    restore_modes: tuple[tuple[str, int], ...] = RESTORE_MODE_OPTIONS
    default_restore_mode: int = -1
    background_image: Optional[str] = None  # landing page background

    def with_overrides(self, *, api_base_url: Optional[str] = None, request_timeout: Optional[float] = None,
                       max_upload_mb: Optional[float] = None, background_image: Optional[str] = None) -> "AppConfig":
        cfg = self
        if api_base_url:
            cfg = replace(cfg, api_base_url=api_base_url)
        if request_timeout is not None:
            # 0 switches the timeout off
            cfg = replace(cfg, request_timeout=request_timeout if request_timeout > 0 else None)
        if max_upload_mb is not None:
            size = int(max_upload_mb * MB)
            cfg = replace(cfg,
                          image_policy=replace(cfg.image_policy, max_size=size),
                          package_policy=replace(cfg.package_policy, max_size=size))
        if background_image:
            cfg = replace(cfg, background_image=background_image)
        return cfg

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "AppConfig":
        env = os.environ if env is None else env

        def _float(key: str) -> Optional[float]:
            raw = env.get(key, "").strip()
            if not raw:
                return None
            try:
                return float(raw)
            except ValueError:
                raise ValueError(f"{key} must be a number, got {raw!r}") from None

        return cls().with_overrides(
            api_base_url=env.get("MRS3_API_BASE_URL", "").strip() or None,
            request_timeout=_float("MRS3_REQUEST_TIMEOUT"),
            max_upload_mb=_float("MRS3_MAX_UPLOAD_MB"),
            background_image=env.get("MRS3_BACKGROUND_IMAGE", "").strip() or None,
        )
