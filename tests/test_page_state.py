import functools

import pytest
import requests

from conftest import FakeSession, make_response
from Model.mrs3_client import COMPRESS_FALLBACK, RESTORE_FALLBACK, MRS3Client
from Model.page_state import (
    UNKNOWN_ERROR, DownscaleState, PageStatus, RequestOutcome, RestoreState, run_request,
)
from Model.polygon_session import PolygonSession
from Model.upload_policy import DEFAULT_MAX_SIZE, PACKAGE_ACCEPT, UploadFile, validate

SQUARE = [(10, 10), (100, 10), (100, 100), (10, 100)]


@pytest.fixture
def image(write_file):
    return UploadFile("photo.png", 100, "image/png", write_file("photo.png", size=100))


@pytest.fixture
def package(write_file):
    return UploadFile("photo.pkg", 64, "", write_file("photo.pkg", size=64))


def test_run_request_success():
    outcome = run_request(lambda: "ok", COMPRESS_FALLBACK)
    assert outcome == RequestOutcome(result="ok")


def test_run_request_network_error_is_unknown():
    def boom():
        raise requests.ConnectionError("refused")
    assert run_request(boom, COMPRESS_FALLBACK).error == UNKNOWN_ERROR


def test_run_request_unexpected_error_is_unknown():
    def boom():
        raise RuntimeError("bug")
    assert run_request(boom, RESTORE_FALLBACK).error == UNKNOWN_ERROR


def test_downscale_end_to_end(image):
    # select image, draw one square, compress with 2x
    session = FakeSession(make_response(200, b"PKG"))
    client = MRS3Client("http://backend", session=session)
    state = DownscaleState()
    polygons = PolygonSession()
    polygons.subscribe(state.set_polygons)

    state.select_file(image)
    assert state.status is PageStatus.FILE_SELECTED
    assert not state.can_submit()

    for x, y in SQUARE:
        polygons.add_point(x, y)
    polygons.complete_polygon()
    assert state.polygons == [SQUARE]
    assert state.can_submit()

    assert state.begin_processing()
    assert state.status is PageStatus.PROCESSING
    outcome = run_request(functools.partial(client.compress, state.upload, state.polygons, state.scaler),
                          COMPRESS_FALLBACK)
    state.settle(outcome)

    data = session.calls[0]["data"]
    assert data["polygons"] == "[[[10,10],[100,10],[100,100],[10,100]]]"
    assert data["scaler"] == "2"
    assert state.status is PageStatus.RESULT
    assert state.result.data == b"PKG"
    assert state.result.filename == "compressed-output.pkg"
    assert state.processing is False


def test_restore_server_error_end_to_end(package):
    client = MRS3Client("http://backend", session=FakeSession(make_response(500, b'{"detail":"model unavailable"}')))
    state = RestoreState()
    state.select_file(package)
    assert state.mrs3_mode == -1

    assert state.begin_processing()
    state.settle(run_request(lambda: client.restore(state.upload, state.mrs3_mode), RESTORE_FALLBACK))

    assert state.error == "model unavailable"
    assert state.processing is False
    assert state.result is None
    assert state.status is PageStatus.ERROR


def test_rejected_file_never_becomes_the_upload():
    state = RestoreState()
    err = validate(UploadFile("archive.txt", 10, "text/plain"), PACKAGE_ACCEPT, DEFAULT_MAX_SIZE)
    state.reject_file(err.message)
    assert state.upload is None
    assert state.error == "Only .pkg files can be uploaded."
    assert not state.can_submit()


def test_rejection_clears_previous_selection(package):
    state = RestoreState()
    state.select_file(package)
    state.reject_file("File is too large. Please choose a file of 10MB or less.")
    assert state.upload is None
    assert state.status is PageStatus.ERROR


def test_no_second_request_while_processing(package):
    state = RestoreState()
    state.select_file(package)
    assert state.begin_processing()
    assert not state.begin_processing()


def test_submit_without_file_is_refused():
    assert not RestoreState().begin_processing()
    assert not DownscaleState().begin_processing()


def test_new_file_clears_result_error_and_polygons(image, write_file):
    state = DownscaleState()
    state.select_file(image)
    state.set_polygons([SQUARE])
    state.begin_processing()
    state.settle(RequestOutcome(error="boom"))
    v = state.version

    other = UploadFile("other.png", 10, "image/png", write_file("other.png", size=10))
    state.select_file(other)
    assert state.upload is other
    assert state.error is None
    assert state.result is None
    assert state.polygons == []
    assert state.version == v + 1


def test_replacing_file_mid_request_bumps_version(package, write_file):
    state = RestoreState()
    state.select_file(package)
    state.begin_processing()
    started = state.version
    state.select_file(UploadFile("b.pkg", 1, "", write_file("b.pkg", size=1)))
    assert state.version != started
    # the new file can be submitted right away
    assert state.processing is False
    assert state.can_submit()


def test_error_is_cleared_on_new_submit(package):
    state = RestoreState()
    state.select_file(package)
    state.begin_processing()
    state.settle(RequestOutcome(error="boom"))
    assert state.begin_processing()
    assert state.error is None


def test_release_resets_everything(image):
    state = DownscaleState()
    state.select_file(image)
    state.set_polygons([SQUARE])
    state.release()
    assert state.upload is None
    assert state.polygons == []
    assert state.status is PageStatus.NO_FILE


def test_set_polygons_copies():
    state = DownscaleState()
    polys = [list(SQUARE)]
    state.set_polygons(polys)
    polys[0].append((0, 0))
    assert state.polygons == [SQUARE]
