from __future__ import annotations

import logging
import re

from .console import MessageSink, NullMessages
from .exceptions import DownloadError
from .http import HttpClient
from .minecraft import fetch_version_manifest, manifest_version_ids


logger = logging.getLogger(__name__)

VERSION_PATTERN = re.compile(r"1\.\d{1,2}\.\d{1,2}", re.ASCII)


def is_version_string(value: str) -> bool:
    return VERSION_PATTERN.fullmatch(value) is not None


class VersionCatalog:
    """Checks requested versions against the Mojang version manifest."""

    def __init__(
        self,
        http_client: HttpClient | None = None,
        messages: MessageSink | None = None,
    ) -> None:
        self.http_client = http_client or HttpClient()
        self.messages = messages or NullMessages()

    def validate(self, version: str) -> bool:
        if not is_version_string(version):
            self.messages.error(f"'{version}' is not a valid version number.")
            return False

        try:
            manifest = fetch_version_manifest(self.http_client)
            available = manifest_version_ids(manifest)
        except DownloadError as exc:
            self.messages.error(f"Failed to fetch version manifest - {exc}")
            return False
        except (KeyError, TypeError, ValueError) as exc:
            self.messages.error(f"Failed to parse version manifest - {exc}")
            return False

        if version not in available:
            self.messages.error(f"Version {version} not found in version manifest.")
            return False
        logger.debug("Version %s found in manifest", version)
        return True

    def list_versions(self, release_only: bool = True, limit: int = 50) -> list[str]:
        """Manifest ids, newest first as published upstream."""
        manifest = fetch_version_manifest(self.http_client)
        versions: list[str] = []
        for entry in manifest["versions"]:
            version_id = str(entry.get("id", ""))
            if not version_id:
                continue
            if release_only and entry.get("type") != "release":
                continue
            versions.append(version_id)
        return versions[:limit]
