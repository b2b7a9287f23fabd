import pytest

cv2 = pytest.importorskip("cv2")
np = pytest.importorskip("numpy")
pytest.importorskip("PyQt6.QtGui")

from Model.image_ops import decode_image_bytes, load_qimage, numpy_rgb_to_qimage, qimage_from_bytes


def _png(w=6, h=4):
    bgr = np.zeros((h, w, 3), dtype=np.uint8)
    bgr[:, :, 2] = 255  # red
    ok, buf = cv2.imencode(".png", bgr)
    assert ok
    return buf.tobytes()


def test_decode_gives_rgb():
    rgb = decode_image_bytes(_png())
    assert rgb.shape == (4, 6, 3)
    assert tuple(rgb[0, 0]) == (255, 0, 0)


def test_decode_garbage():
    assert decode_image_bytes(b"") is None
    assert decode_image_bytes(b"definitely not an image") is None


def test_qimage_keeps_natural_size():
    img = numpy_rgb_to_qimage(np.zeros((30, 50, 3), dtype=np.uint8))
    assert (img.width(), img.height()) == (50, 30)


def test_qimage_from_bytes():
    img = qimage_from_bytes(_png(8, 5))
    assert (img.width(), img.height()) == (8, 5)
    assert qimage_from_bytes(b"nope") is None


def test_load_qimage(tmp_path):
    p = tmp_path / "a.png"
    p.write_bytes(_png(3, 2))
    img = load_qimage(str(p))
    assert (img.width(), img.height()) == (3, 2)
    assert load_qimage(str(tmp_path / "missing.png")) is None


@pytest.mark.parametrize("shape", [(4, 6), (4, 6, 4)])
def test_gray_and_alpha_images_decode_to_rgb(shape):
    ok, buf = cv2.imencode(".png", np.full(shape, 200, dtype=np.uint8))
    assert ok
    assert decode_image_bytes(buf.tobytes()).shape == (4, 6, 3)
