from __future__ import annotations

from typing import Any

from .exceptions import VersionNotFoundError
from .http import HttpClient

MOJANG_MANIFEST_URL = "https://piston-meta.mojang.com/mc/game/version_manifest_v2.json"


def fetch_version_manifest(http_client: HttpClient) -> dict[str, Any]:
    manifest = http_client.get_json(MOJANG_MANIFEST_URL)
    if not isinstance(manifest, dict) or not isinstance(manifest.get("versions"), list):
        raise ValueError("Version manifest is missing the 'versions' list.")
    return manifest


def manifest_version_ids(manifest: dict[str, Any]) -> set[str]:
    return {str(entry["id"]) for entry in manifest["versions"]}


def resolve_mojang_version(
    http_client: HttpClient, requested_version: str | None
) -> tuple[str, dict[str, Any]]:
    manifest = fetch_version_manifest(http_client)
    if requested_version in (None, "latest"):
        requested_version = manifest["latest"]["release"]

    version_url = None
    for version in manifest["versions"]:
        if version["id"] == requested_version:
            version_url = version["url"]
            break
    if version_url is None:
        raise VersionNotFoundError(
            f"Minecraft version '{requested_version}' was not found in Mojang metadata."
        )

    version_data = http_client.get_json(version_url)
    return str(requested_version), version_data
