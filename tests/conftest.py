import os

import pytest
import requests


def make_response(status: int, content: bytes = b"", headers: dict | None = None) -> requests.Response:
    r = requests.Response()
    r.status_code = status
    r._content = content
    r.headers.update(headers or {})
    return r


class FakeSession:
    # Stands in for requests.Session: records every POST and answers with a canned response
    def __init__(self, response=None):
        self.response = response if response is not None else make_response(200, b"OK")
        self.calls = []

    def post(self, url, files=None, data=None, timeout=None):
        # file handles are closed once the client returns, so read them now
        files = {k: (name, fh.read(), mime) for k, (name, fh, mime) in (files or {}).items()}
        self.calls.append({"url": url, "files": files, "data": dict(data or {}), "timeout": timeout})
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def write_file(tmp_path):
    def _write(name: str, size: int = 0, content: bytes | None = None):
        p = tmp_path / name
        p.write_bytes(content if content is not None else b"\0" * size)
        return str(p)
    return _write


@pytest.fixture(scope="session")
def qapp():
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    QtWidgets = pytest.importorskip("PyQt6.QtWidgets")
    return QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
