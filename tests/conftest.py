import io

import pytest


class FakeResponse:
    def __init__(self, payload: bytes, headers: dict[str, str] | None = None) -> None:
        self._stream = io.BytesIO(payload)
        self.headers = headers or {}

    def read(self, size: int = -1) -> bytes:
        return self._stream.read(size)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        return False


class FakeHttp:
    """Serves canned JSON by URL and records every request."""

    def __init__(self, json_map=None, error=None):
        self.json_map = json_map or {}
        self.error = error
        self.requested: list[str] = []
        self.downloads: list[dict] = []

    def get_json(self, url):
        self.requested.append(url)
        if self.error is not None:
            raise self.error
        return self.json_map[url]

    def download(self, url, destination_dir, file_name, progress=None, **kwargs):
        self.downloads.append({"url": url, "destination_dir": destination_dir, **kwargs})
        destination = destination_dir / file_name
        destination.write_bytes(b"jar")
        return destination


class RecordingMessages:
    def __init__(self):
        self.infos: list[str] = []
        self.warnings: list[str] = []
        self.errors: list[str] = []

    def info(self, message):
        self.infos.append(message)

    def warn(self, message):
        self.warnings.append(message)

    def error(self, message):
        self.errors.append(message)


MOJANG_URL = "https://piston-meta.mojang.com/mc/game/version_manifest_v2.json"
PAPER_URL = "https://qing762.is-a.dev/api/papermc"


@pytest.fixture
def manifest():
    return {
        "latest": {"release": "1.20.4", "snapshot": "24w03a"},
        "versions": [
            {"id": "24w03a", "type": "snapshot", "url": "https://example.com/24w03a.json"},
            {"id": "1.20.4", "type": "release", "url": "https://example.com/1.20.4.json"},
            {"id": "1.20.2", "type": "release", "url": "https://example.com/1.20.2.json"},
        ],
    }


@pytest.fixture
def paper_lookup():
    return {
        "latest": "1.20.4",
        "versions": {
            "1.20.4": "https://api.papermc.io/v2/projects/paper/versions/1.20.4/builds/496/downloads/paper-1.20.4-496.jar",
            "1.20.2": "https://api.papermc.io/v2/projects/paper/versions/1.20.2/builds/318/downloads/paper-1.20.2-318.jar",
        },
    }
