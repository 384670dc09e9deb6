from __future__ import annotations

from abc import ABC, abstractmethod

from ..http import HttpClient
from ..models import ArtifactReference, Software


class ArtifactProvider(ABC):
    software: Software

    @abstractmethod
    def resolve(self, version: str | None, http_client: HttpClient) -> ArtifactReference:
        """Return the artifact for ``version``; ``None`` means the latest one."""
        raise NotImplementedError
