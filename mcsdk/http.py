from __future__ import annotations

from pathlib import Path
from typing import Any
import hashlib
import http.client
import ipaddress
import json
import logging
import tempfile
import urllib.error
import urllib.parse
import urllib.request

from .console import NullProgress, ProgressSink
from .exceptions import DownloadError


logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
MAX_TEXT_RESPONSE_BYTES = 16 * 1024 * 1024
MAX_DOWNLOAD_BYTES = 512 * 1024 * 1024


def hash_file(path: Path, algorithm: str = "sha1") -> str:
    digest = hashlib.new(algorithm)
    with path.open("rb") as handle:
        for block in iter(lambda: handle.read(CHUNK_SIZE), b""):
            digest.update(block)
    return digest.hexdigest()


def declared_length(headers: Any) -> int:
    """Content-Length as an int, 0 when missing or unparseable."""
    value = headers.get("Content-Length") if headers is not None else None
    if not value:
        return 0
    try:
        return max(int(value), 0)
    except ValueError:
        return 0


class HttpClient:
    def __init__(
        self,
        timeout_seconds: int = 30,
        max_text_response_bytes: int = MAX_TEXT_RESPONSE_BYTES,
        max_download_bytes: int = MAX_DOWNLOAD_BYTES,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.max_text_response_bytes = max_text_response_bytes
        self.max_download_bytes = max_download_bytes
        self.user_agent = "mcsdk/0.1"

    def _request(self, url: str) -> urllib.request.Request:
        self._validate_url(url)
        return urllib.request.Request(url, headers={"User-Agent": self.user_agent})

    def get_json(self, url: str) -> Any:
        payload = self.get_text(url)
        try:
            return json.loads(payload)
        except json.JSONDecodeError as exc:
            raise DownloadError(f"Invalid JSON from {url}") from exc

    def get_text(self, url: str) -> str:
        logger.debug("GET %s", url)
        try:
            with urllib.request.urlopen(
                self._request(url), timeout=self.timeout_seconds
            ) as response:
                return self._read_limited(
                    response,
                    max_bytes=self.max_text_response_bytes,
                    url=url,
                ).decode("utf-8")
        except (urllib.error.URLError, http.client.HTTPException, OSError) as exc:
            raise DownloadError(f"Request failed for {url}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise DownloadError(f"Response from {url} is not valid UTF-8.") from exc

    def download(
        self,
        url: str,
        destination_dir: Path,
        file_name: str,
        progress: ProgressSink | None = None,
        expected_hash: str | None = None,
        hash_algorithm: str = "sha1",
    ) -> Path:
        """Stream ``url`` into ``destination_dir / file_name``.

        The body is written chunk by chunk to a temporary file next to the
        destination and moved into place once complete, so a failed transfer
        never leaves a truncated artifact behind.
        """
        progress = progress or NullProgress()
        destination_dir = Path(destination_dir)
        destination = destination_dir / file_name
        tmp_path: Path | None = None
        logger.debug("Downloading %s to %s", url, destination)
        try:
            destination_dir.mkdir(parents=True, exist_ok=True)
            with urllib.request.urlopen(
                self._request(url), timeout=self.timeout_seconds
            ) as response, tempfile.NamedTemporaryFile(
                "wb", delete=False, dir=str(destination_dir), suffix=".part"
            ) as tmp:
                tmp_path = Path(tmp.name)
                total = declared_length(getattr(response, "headers", None))
                if total > self.max_download_bytes:
                    raise DownloadError(
                        f"Download for {file_name} exceeds the size limit."
                    )
                received = 0
                progress.report(received, total)
                while True:
                    chunk = response.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    received += len(chunk)
                    if received > self.max_download_bytes:
                        raise DownloadError(
                            f"Download for {file_name} exceeded the allowed size limit."
                        )
                    tmp.write(chunk)
                    progress.report(received, total)
            if expected_hash:
                actual = hash_file(tmp_path, hash_algorithm)
                if actual.lower() != expected_hash.lower():
                    raise DownloadError(
                        f"Hash mismatch for {file_name}. "
                        f"Expected {expected_hash} ({hash_algorithm}), got {actual}."
                    )
            tmp_path.replace(destination)
        except (urllib.error.URLError, http.client.HTTPException, OSError) as exc:
            raise DownloadError(f"Download failed for {url}: {exc}") from exc
        finally:
            progress.finish()
            if tmp_path and tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    logger.warning("Could not remove partial download %s", tmp_path)
        logger.debug("Saved %s (%d bytes)", destination, received)
        return destination

    @staticmethod
    def _validate_url(url: str) -> None:
        parsed = urllib.parse.urlparse(url)
        if parsed.scheme.lower() != "https":
            raise DownloadError(f"Blocked URL with unsupported scheme: {url}")
        host = parsed.hostname
        if not host:
            raise DownloadError(f"Blocked URL with missing host: {url}")
        try:
            ip = ipaddress.ip_address(host)
        except ValueError:
            return
        if (
            ip.is_private
            or ip.is_loopback
            or ip.is_link_local
            or ip.is_multicast
            or ip.is_reserved
        ):
            raise DownloadError(f"Blocked URL targeting disallowed address: {url}")

    @staticmethod
    def _read_limited(response, max_bytes: int, url: str) -> bytes:
        chunks: list[bytes] = []
        received = 0
        while True:
            chunk = response.read(CHUNK_SIZE)
            if not chunk:
                break
            received += len(chunk)
            if received > max_bytes:
                raise DownloadError(
                    f"Response from {url} exceeded the allowed size limit."
                )
            chunks.append(chunk)
        return b"".join(chunks)
