from __future__ import annotations

from pathlib import Path
from typing import Iterable, Protocol
import logging
import os
import random
import shutil
import string
import tempfile

from .console import MessageSink, NullMessages
from .exceptions import WorkspaceError
from .models import ServerSpec, Workspace


logger = logging.getLogger(__name__)

SCRATCH_CANDIDATES = ("/var/tmp",)
SCRATCH_SUBDIR = "mcsdk"
SUFFIX_ALPHABET = string.ascii_letters + string.digits
SUFFIX_LENGTH = 8
CONSENT_CONTENT = b"eula=true"


class ScratchDirectoryProvider(Protocol):
    def base_directory(self) -> Path: ...


class SystemScratchDirectory:
    """Prefers a fixed writable scratch directory, else a fresh temp directory."""

    def __init__(self, candidates: Iterable[str] = SCRATCH_CANDIDATES) -> None:
        self.candidates = tuple(candidates)

    def base_directory(self) -> Path:
        if os.name == "posix":
            for candidate in self.candidates:
                if os.path.isdir(candidate) and os.access(candidate, os.W_OK):
                    return Path(candidate)
        try:
            return Path(tempfile.mkdtemp(prefix="mcsdk-tmp"))
        except OSError as exc:
            raise WorkspaceError(f"No writable temporary directory: {exc}") from exc


class FixedScratchDirectory:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def base_directory(self) -> Path:
        return self.path


def random_suffix(rng: random.Random, length: int = SUFFIX_LENGTH) -> str:
    return "".join(rng.choice(SUFFIX_ALPHABET) for _ in range(length))


def ephemeral_name(spec: ServerSpec, rng: random.Random) -> str:
    return f"{spec.software.value}-{spec.version}-{random_suffix(rng)}"


class WorkspaceManager:
    """Prepares the server directory: root, consent file and plugins."""

    def __init__(
        self,
        scratch: ScratchDirectoryProvider | None = None,
        rng: random.Random | None = None,
        messages: MessageSink | None = None,
        stop_on_missing_plugin: bool = True,
    ) -> None:
        self.scratch = scratch or SystemScratchDirectory()
        self.rng = rng or random.SystemRandom()
        self.messages = messages or NullMessages()
        # A missing plugin abandons the rest of the list unless this is off.
        self.stop_on_missing_plugin = stop_on_missing_plugin

    def materialize(self, spec: ServerSpec) -> Workspace:
        if spec.working_directory is None:
            return self._create_ephemeral(spec)
        return self._use_existing(Path(spec.working_directory))

    def _create_ephemeral(self, spec: ServerSpec) -> Workspace:
        parent = self.scratch.base_directory() / SCRATCH_SUBDIR
        try:
            parent.mkdir(exist_ok=True)
        except OSError as exc:
            raise WorkspaceError(f"Error creating directory {parent}: {exc}") from exc

        root = parent / ephemeral_name(spec, self.rng)
        try:
            root.mkdir()
        except OSError as exc:
            raise WorkspaceError(f"Error creating directory {root}: {exc}") from exc
        logger.debug("Created ephemeral workspace %s", root)
        return Workspace(root=root, ephemeral=True)

    def _use_existing(self, path: Path) -> Workspace:
        if not path.exists():
            try:
                path.mkdir()
            except OSError as exc:
                self.messages.error(f"Error creating directory: {exc}")
        try:
            root = path.resolve(strict=True)
        except OSError as exc:
            raise WorkspaceError(f"Failed to get the full path of {path}: {exc}") from exc
        if not root.is_dir():
            raise WorkspaceError(f"{root} is a file. You need to specify a directory.")
        return Workspace(root=root, ephemeral=False)

    def write_consent(self, workspace: Workspace) -> Path:
        try:
            workspace.consent_path.write_bytes(CONSENT_CONTENT)
        except OSError as exc:
            raise WorkspaceError(
                f"Error writing {workspace.consent_path.name}: {exc}"
            ) from exc
        return workspace.consent_path

    def ensure_plugins_dir(self, workspace: Workspace) -> Path:
        try:
            workspace.plugins_dir.mkdir(exist_ok=True)
        except OSError as exc:
            raise WorkspaceError(
                f"Error creating directory {workspace.plugins_dir}: {exc}"
            ) from exc
        return workspace.plugins_dir

    def stage_plugins(self, plugins: Iterable[Path], plugins_dir: Path) -> list[Path]:
        staged: list[Path] = []
        for plugin in map(Path, plugins):
            if not plugin.exists():
                if self.stop_on_missing_plugin:
                    self.messages.warn(
                        f"{plugin.name} does not exist. Skipping remaining plugins..."
                    )
                    break
                self.messages.warn(f"{plugin.name} does not exist. Skipping...")
                continue
            if not (plugin.is_absolute() and plugin.is_file() and not plugin.is_symlink()):
                self.messages.warn(
                    f"{plugin} is not an absolute path to a regular file. Skipping..."
                )
                continue
            try:
                staged.append(self._copy_into(plugin, plugins_dir))
            except OSError as exc:
                self.messages.warn(f"Failed to copy {plugin.name}: {exc}")
                continue
            self.messages.info(f"{plugin.name} moved to plugins folder.")
        return staged

    @staticmethod
    def _copy_into(plugin: Path, plugins_dir: Path) -> Path:
        if not plugins_dir.is_dir():
            raise FileNotFoundError(f"Destination folder {plugins_dir} does not exist")
        destination = plugins_dir / plugin.name
        shutil.copyfile(plugin, destination)
        return destination
