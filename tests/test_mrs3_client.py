import pytest
import requests

from conftest import FakeSession, make_response
from Model.mrs3_client import (
    COMPRESS_FALLBACK, COMPRESS_FILENAME, RESTORE_FALLBACK, RESTORE_FILENAME, BackendError, MRS3Client,
    ProcessingResult, error_detail,
)
from Model.upload_policy import UploadFile

SQUARE = [(10, 10), (100, 10), (100, 100), (10, 100)]


@pytest.fixture
def image(write_file):
    path = write_file("photo.png", content=b"\x89PNG fake")
    return UploadFile("photo.png", 9, "image/png", path)


@pytest.fixture
def package(write_file):
    path = write_file("photo.pkg", content=b"PKGDATA")
    return UploadFile("photo.pkg", 7, "", path)


def test_compress_sends_multipart_form(image):
    session = FakeSession(make_response(200, b"PKGBYTES"))
    client = MRS3Client("http://backend/", timeout=30, session=session)

    result = client.compress(image, [SQUARE], 2)

    call, = session.calls
    assert call["url"] == "http://backend/compress"
    assert call["files"]["image"] == ("photo.png", b"\x89PNG fake", "image/png")
    assert call["data"] == {"polygons": "[[[10,10],[100,10],[100,100],[10,100]]]", "scaler": "2"}
    assert call["timeout"] == 30
    assert result == ProcessingResult(b"PKGBYTES", COMPRESS_FILENAME, "application/octet-stream")


def test_compress_rounds_coordinates(image):
    session = FakeSession(make_response(200, b"x"))
    MRS3Client("http://backend", session=session).compress(image, [[(1.5, 2.4), (3.0, 4.0), (5.49, 6.5)]], 4)
    assert session.calls[0]["data"]["polygons"] == "[[[2,2],[3,4],[5,7]]]"
    assert session.calls[0]["data"]["scaler"] == "4"


@pytest.mark.parametrize("scaler", [1, 5, 0])
def test_compress_rejects_bad_scaler(image, fake_session, scaler):
    with pytest.raises(ValueError):
        MRS3Client("http://backend", session=fake_session).compress(image, [SQUARE], scaler)
    assert fake_session.calls == []


def test_compress_requires_polygons(image, fake_session):
    with pytest.raises(ValueError):
        MRS3Client("http://backend", session=fake_session).compress(image, [], 2)


def test_compress_requires_file_on_disk(fake_session):
    with pytest.raises(ValueError):
        MRS3Client("http://backend", session=fake_session).compress(UploadFile("a.png", 1, "image/png"), [SQUARE], 2)


def test_compress_error_uses_detail(image):
    session = FakeSession(make_response(400, b'{"detail":"Invalid polygons"}'))
    with pytest.raises(BackendError) as exc:
        MRS3Client("http://backend", session=session).compress(image, [SQUARE], 2)
    assert exc.value.message == "Invalid polygons"
    assert exc.value.status_code == 400


def test_compress_error_without_detail_uses_fallback(image):
    session = FakeSession(make_response(502, b"<html>Bad gateway</html>"))
    with pytest.raises(BackendError) as exc:
        MRS3Client("http://backend", session=session).compress(image, [SQUARE], 2)
    assert exc.value.message == COMPRESS_FALLBACK


def test_restore_sends_package_and_mode(package):
    session = FakeSession(make_response(200, b"PNGDATA", {"Content-Type": "image/png"}))
    result = MRS3Client("http://backend", session=session).restore(package, -1)

    call, = session.calls
    assert call["url"] == "http://backend/restore"
    assert call["files"]["pkg"] == ("photo.pkg", b"PKGDATA", "application/octet-stream")
    assert call["data"] == {"mrs3_mode": "-1"}
    assert result.filename == RESTORE_FILENAME
    assert result.data == b"PNGDATA"
    assert result.media_type == "image/png"


def test_restore_media_type_defaults_to_png(package):
    session = FakeSession(make_response(200, b"x"))
    assert MRS3Client("http://backend", session=session).restore(package, 0).media_type == "image/png"


def test_restore_server_error_detail(package):
    session = FakeSession(make_response(500, b'{"detail":"model unavailable"}'))
    with pytest.raises(BackendError) as exc:
        MRS3Client("http://backend", session=session).restore(package, -1)
    assert exc.value.message == "model unavailable"
    assert exc.value.status_code == 500


def test_restore_rejects_unknown_mode(package, fake_session):
    with pytest.raises(ValueError):
        MRS3Client("http://backend", session=fake_session).restore(package, 7)


def test_network_errors_propagate(package):
    session = FakeSession(requests.ConnectionError("refused"))
    with pytest.raises(requests.ConnectionError):
        MRS3Client("http://backend", session=session).restore(package, 0)


@pytest.mark.parametrize("body", [
    b'{"detail":[{"loc":["body","scaler"],"msg":"field required"}]}',
    b'{"detail":""}',
    b'{"message":"nope"}',
    b'["detail"]',
    b"not json",
    b"",
])
def test_error_detail_falls_back(body):
    assert error_detail(make_response(422, body), RESTORE_FALLBACK) == RESTORE_FALLBACK


def test_result_save(tmp_path):
    out = tmp_path / "out.pkg"
    ProcessingResult(b"abc", COMPRESS_FILENAME).save(str(out))
    assert out.read_bytes() == b"abc"
