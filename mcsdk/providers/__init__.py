from __future__ import annotations

from ..models import Software
from .base import ArtifactProvider
from .paper import PaperProvider
from .vanilla import VanillaProvider


def create_provider_registry() -> dict[Software, ArtifactProvider]:
    providers: list[ArtifactProvider] = [
        PaperProvider(),
        VanillaProvider(),
    ]
    return {provider.software: provider for provider in providers}


__all__ = [
    "ArtifactProvider",
    "create_provider_registry",
]
