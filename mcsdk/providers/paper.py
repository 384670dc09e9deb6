from __future__ import annotations

from ..exceptions import UpstreamUnavailableError, VersionNotFoundError
from ..http import HttpClient
from ..models import ArtifactReference, Software
from .base import ArtifactProvider

PAPER_LOOKUP_URL = "https://qing762.is-a.dev/api/papermc"


class PaperProvider(ArtifactProvider):
    software = Software.PAPER

    def __init__(self, lookup_url: str = PAPER_LOOKUP_URL) -> None:
        self.lookup_url = lookup_url

    def resolve(self, version: str | None, http_client: HttpClient) -> ArtifactReference:
        data = http_client.get_json(self.lookup_url)
        try:
            latest = str(data["latest"])
            versions = dict(data["versions"])
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamUnavailableError(
                f"Paper lookup response from {self.lookup_url} is malformed."
            ) from exc

        if version in (None, "latest"):
            version = latest
        download_url = versions.get(version)
        if not download_url:
            raise VersionNotFoundError(f"Version {version} not found in API response.")
        return ArtifactReference(url=str(download_url))
