from .catalog import VersionCatalog
from .models import ServerSpec, ServerState, Software, Workspace
from .process import ServerProcess
from .resolver import ArtifactResolver
from .workspace import WorkspaceManager

__all__ = [
    "ArtifactResolver",
    "ServerProcess",
    "ServerSpec",
    "ServerState",
    "Software",
    "VersionCatalog",
    "Workspace",
    "WorkspaceManager",
]
