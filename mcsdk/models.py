from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


ARTIFACT_FILE_NAME = "server.jar"
CONSENT_FILE_NAME = "eula.txt"
PLUGINS_DIR_NAME = "plugins"


class Software(str, Enum):
    PAPER = "paper"
    SPIGOT = "spigot"
    VANILLA = "vanilla"

    def __str__(self) -> str:
        return self.value


class ServerState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    RUNNING = "running"
    STOPPED = "stopped"
    KILLED = "killed"


@dataclass(slots=True, frozen=True)
class ServerSpec:
    software: Software
    version: str
    plugins: tuple[Path, ...] = ()
    working_directory: Path | None = None
    args: tuple[str, ...] = ()
    mem: int = 2048
    gui: bool = False


@dataclass(slots=True, frozen=True)
class Workspace:
    """A prepared server directory and the paths derived from it."""

    root: Path
    ephemeral: bool = False

    @property
    def plugins_dir(self) -> Path:
        return self.root / PLUGINS_DIR_NAME

    @property
    def artifact_path(self) -> Path:
        return self.root / ARTIFACT_FILE_NAME

    @property
    def consent_path(self) -> Path:
        return self.root / CONSENT_FILE_NAME


@dataclass(slots=True, frozen=True)
class ArtifactReference:
    url: str
    file_name: str = ARTIFACT_FILE_NAME
    expected_hash: str | None = None
    hash_algorithm: str = "sha1"


@dataclass(slots=True, frozen=True)
class Unsupported:
    """Resolution outcome for a software kind that has no download lookup."""

    software: Software


@dataclass(slots=True, frozen=True)
class RunResult:
    state: ServerState
    returncode: int | None = None
