import logging
from typing import Optional

import cv2
import numpy as np
from PyQt6.QtGui import QImage, QImageReader

log = logging.getLogger(__name__)


def numpy_rgb_to_qimage(rgb: np.ndarray) -> QImage:
    h, w, _ = rgb.shape
    rgb = np.ascontiguousarray(rgb)
    # QImage must not point to memory owned by numpy -> copy()
    qimg = QImage(
        rgb.data, w, h, 3 * w,
        QImage.Format.Format_RGB888
    ).copy()
    return qimg


def decode_image_bytes(data: bytes) -> Optional[np.ndarray]:
    """
    Decodes an encoded image (PNG, JPEG, ...) held in memory into an RGB array (HxWx3, uint8).
    Returns None if OpenCV cannot read it.
    """
    if not data:
        return None
    buf = np.frombuffer(data, dtype=np.uint8)
    bgr = cv2.imdecode(buf, cv2.IMREAD_COLOR)
    if bgr is None:
        return None
    return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)


def load_image_rgb(path: str) -> Optional[np.ndarray]:
    bgr = cv2.imread(path, cv2.IMREAD_COLOR)
    if bgr is None:
        return None
    return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)


def load_qimage(path: str) -> Optional[QImage]:
    # OpenCV first (same decoder family the backend uses, so pixel sizes agree), Qt as fallback (e.g. GIF)
    rgb = load_image_rgb(path)
    if rgb is not None:
        return numpy_rgb_to_qimage(rgb)

    reader = QImageReader(path)
    reader.setAutoTransform(True)
    img = reader.read()
    if img.isNull():
        log.warning("[LOAD] could not load image: %s (%s)", path, reader.errorString())
        return None
    return img


def qimage_from_bytes(data: bytes) -> Optional[QImage]:
    rgb = decode_image_bytes(data)
    if rgb is not None:
        return numpy_rgb_to_qimage(rgb)
    img = QImage.fromData(data)
    return None if img.isNull() else img
