from __future__ import annotations

import logging
from typing import Mapping

from .exceptions import DownloadError, UpstreamUnavailableError
from .http import HttpClient
from .models import ArtifactReference, Software, Unsupported
from .providers import ArtifactProvider, create_provider_registry


logger = logging.getLogger(__name__)


class ArtifactResolver:
    def __init__(
        self,
        http_client: HttpClient | None = None,
        providers: Mapping[Software, ArtifactProvider] | None = None,
    ) -> None:
        self.http_client = http_client or HttpClient()
        self._providers = dict(providers) if providers is not None else create_provider_registry()

    @property
    def supported_software(self) -> tuple[Software, ...]:
        return tuple(sorted(self._providers, key=lambda software: software.value))

    def resolve(
        self, software: Software, version: str | None = None
    ) -> ArtifactReference | Unsupported:
        provider = self._providers.get(software)
        if provider is None:
            logger.debug("No download lookup for %s", software)
            return Unsupported(software)
        try:
            artifact = provider.resolve(version, self.http_client)
        except DownloadError as exc:
            raise UpstreamUnavailableError(
                f"Failed to fetch API response for {software}: {exc}"
            ) from exc
        logger.debug("Resolved %s %s to %s", software, version or "latest", artifact.url)
        return artifact
