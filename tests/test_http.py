import http.client

import pytest

from conftest import FakeResponse
from mcsdk.exceptions import DownloadError
from mcsdk.http import HttpClient, declared_length


class _RecordingProgress:
    def __init__(self):
        self.reports: list[tuple[int, int]] = []
        self.finished = False

    def report(self, current, total):
        self.reports.append((current, total))

    def finish(self):
        self.finished = True


class _BrokenResponse(FakeResponse):
    def read(self, size: int = -1) -> bytes:
        data = super().read(4)
        if not data:
            raise OSError("connection reset")
        return data


def _serve(monkeypatch, response):
    def _fake_open(request, timeout=0):
        return response

    monkeypatch.setattr("urllib.request.urlopen", _fake_open)


def test_http_client_blocks_non_https_urls():
    client = HttpClient()
    with pytest.raises(DownloadError):
        client.get_text("http://example.com/test.txt")


def test_http_client_blocks_private_ip_hosts():
    client = HttpClient()
    with pytest.raises(DownloadError):
        client.get_text("https://127.0.0.1/internal")


def test_http_client_limits_text_response_size(monkeypatch):
    client = HttpClient(max_text_response_bytes=5)
    _serve(monkeypatch, FakeResponse(b"too-large-response"))
    with pytest.raises(DownloadError):
        client.get_text("https://example.com/test.txt")


def test_get_json_rejects_malformed_body(monkeypatch):
    _serve(monkeypatch, FakeResponse(b"{not json"))
    with pytest.raises(DownloadError):
        HttpClient().get_json("https://example.com/manifest.json")


def test_download_with_zero_content_length_writes_everything(monkeypatch, tmp_path):
    payload = b"x" * (3 * 1024 * 1024 + 17)
    _serve(monkeypatch, FakeResponse(payload, headers={"Content-Length": "0"}))
    progress = _RecordingProgress()

    saved = HttpClient().download(
        "https://example.com/server.jar", tmp_path, "server.jar", progress=progress
    )

    assert saved == tmp_path / "server.jar"
    assert saved.read_bytes() == payload
    assert progress.reports[-1] == (len(payload), 0)
    assert all(total == 0 for _, total in progress.reports)
    assert progress.finished


def test_download_reports_declared_total(monkeypatch, tmp_path):
    _serve(monkeypatch, FakeResponse(b"abcdef", headers={"Content-Length": "6"}))
    progress = _RecordingProgress()

    HttpClient().download("https://example.com/a.jar", tmp_path, "a.jar", progress=progress)

    assert progress.reports == [(0, 6), (6, 6)]


def test_download_creates_missing_destination_dirs(monkeypatch, tmp_path):
    _serve(monkeypatch, FakeResponse(b"jar"))
    destination = tmp_path / "a" / "b"

    HttpClient().download("https://example.com/server.jar", destination, "server.jar")

    assert (destination / "server.jar").read_bytes() == b"jar"


def test_download_failure_surfaces_error_and_leaves_no_artifact(monkeypatch, tmp_path):
    _serve(monkeypatch, _BrokenResponse(b"partial-bytes"))
    progress = _RecordingProgress()

    with pytest.raises(DownloadError, match="connection reset"):
        HttpClient().download(
            "https://example.com/server.jar", tmp_path, "server.jar", progress=progress
        )

    assert list(tmp_path.iterdir()) == []
    assert progress.finished


def test_download_rejects_hash_mismatch(monkeypatch, tmp_path):
    _serve(monkeypatch, FakeResponse(b"jar"))
    with pytest.raises(DownloadError, match="Hash mismatch"):
        HttpClient().download(
            "https://example.com/server.jar",
            tmp_path,
            "server.jar",
            expected_hash="0" * 40,
        )
    assert not (tmp_path / "server.jar").exists()


def test_declared_length_handles_missing_and_garbage_values():
    assert declared_length({}) == 0
    assert declared_length({"Content-Length": "abc"}) == 0
    assert declared_length({"Content-Length": "42"}) == 42
    assert declared_length(None) == 0


class _TruncatedResponse(FakeResponse):
    def read(self, size: int = -1) -> bytes:
        raise http.client.IncompleteRead(b"{", 100)


def test_get_json_wraps_truncated_body(monkeypatch):
    _serve(monkeypatch, _TruncatedResponse(b""))
    with pytest.raises(DownloadError, match="Request failed"):
        HttpClient().get_json("https://example.com/manifest.json")


def test_download_wraps_truncated_body(monkeypatch, tmp_path):
    _serve(monkeypatch, _TruncatedResponse(b"", headers={"Content-Length": "100"}))
    with pytest.raises(DownloadError, match="Download failed"):
        HttpClient().download("https://example.com/server.jar", tmp_path, "server.jar")
    assert list(tmp_path.iterdir()) == []
