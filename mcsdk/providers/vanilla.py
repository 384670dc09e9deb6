from __future__ import annotations

from ..exceptions import UpstreamUnavailableError
from ..http import HttpClient
from ..minecraft import resolve_mojang_version
from ..models import ArtifactReference, Software
from .base import ArtifactProvider


class VanillaProvider(ArtifactProvider):
    software = Software.VANILLA

    def resolve(self, version: str | None, http_client: HttpClient) -> ArtifactReference:
        try:
            resolved, version_data = resolve_mojang_version(
                http_client=http_client,
                requested_version=version,
            )
            server_download = version_data.get("downloads", {}).get("server")
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise UpstreamUnavailableError("Mojang version metadata is malformed.") from exc

        if not server_download or not server_download.get("url"):
            raise UpstreamUnavailableError(
                f"Minecraft version {resolved} does not publish a server download."
            )
        return ArtifactReference(
            url=str(server_download["url"]),
            expected_hash=server_download.get("sha1"),
            hash_algorithm="sha1",
        )
