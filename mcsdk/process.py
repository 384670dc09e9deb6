from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from typing import Awaitable, Callable

from .catalog import VersionCatalog
from .console import MessageSink, NullMessages, ProgressSink
from .exceptions import LaunchError, VersionValidationError
from .http import HttpClient
from .models import (
    ARTIFACT_FILE_NAME,
    RunResult,
    ServerSpec,
    ServerState,
    Unsupported,
    Workspace,
)
from .resolver import ArtifactResolver
from .workspace import WorkspaceManager


logger = logging.getLogger(__name__)

MIN_HEAP = "-Xms256M"
NO_GUI_FLAG = "nogui"

InterruptWaiter = Callable[[], Awaitable[object]]


async def wait_for_interrupt(signum: int = signal.SIGINT) -> None:
    """Resolve on the next ``signum``; the handler is removed on exit or cancel."""
    loop = asyncio.get_running_loop()
    received = asyncio.Event()
    try:
        loop.add_signal_handler(signum, received.set)
    except (NotImplementedError, RuntimeError, ValueError):
        # Windows event loops have no add_signal_handler.
        previous = signal.signal(
            signum, lambda _sig, _frame: loop.call_soon_threadsafe(received.set)
        )
        try:
            await received.wait()
        finally:
            signal.signal(signum, previous)
        return
    try:
        await received.wait()
    finally:
        loop.remove_signal_handler(signum)


class ServerProcess:
    """Provisions a server directory and supervises the server process in it.

    ``initialize`` drives the blocking provisioning steps (version check,
    workspace, download, ``eula.txt``, plugins). ``run`` launches the server
    with the operator's terminal attached and waits for whichever comes first:
    the server exiting by itself, or an interrupt, in which case the server is
    killed.
    """

    def __init__(
        self,
        spec: ServerSpec,
        http_client: HttpClient | None = None,
        catalog: VersionCatalog | None = None,
        resolver: ArtifactResolver | None = None,
        workspace_manager: WorkspaceManager | None = None,
        messages: MessageSink | None = None,
        progress: ProgressSink | None = None,
        java_path: str = "java",
    ) -> None:
        self.spec = spec
        self.http_client = http_client or HttpClient()
        self.messages = messages or NullMessages()
        self.progress = progress
        self.catalog = catalog or VersionCatalog(self.http_client, self.messages)
        self.resolver = resolver or ArtifactResolver(self.http_client)
        self.workspace_manager = workspace_manager or WorkspaceManager(
            messages=self.messages
        )
        self.java_path = java_path
        self.state = ServerState.UNINITIALIZED
        self.workspace: Workspace | None = None

    def initialize(self, validate_version: bool = True) -> Workspace:
        self.state = ServerState.INITIALIZING
        if validate_version and not self.catalog.validate(self.spec.version):
            raise VersionValidationError(
                f"Version {self.spec.version} is not a known server version."
            )

        self.messages.info("Creating working directory.")
        workspace = self.workspace_manager.materialize(self.spec)

        self.messages.info("Downloading server software.")
        self._fetch_artifact(workspace)

        self.messages.info(f"Creating {workspace.consent_path.name}.")
        self.workspace_manager.write_consent(workspace)

        plugins_dir = self.workspace_manager.ensure_plugins_dir(workspace)
        self.workspace_manager.stage_plugins(self.spec.plugins, plugins_dir)

        self.workspace = workspace
        self.state = ServerState.READY
        return workspace

    def _fetch_artifact(self, workspace: Workspace) -> None:
        artifact = self.resolver.resolve(self.spec.software, self.spec.version)
        if isinstance(artifact, Unsupported):
            self.messages.warn(
                f"Downloading {artifact.software} is not supported yet; "
                f"{workspace.root} has no {ARTIFACT_FILE_NAME}."
            )
            return
        self.http_client.download(
            url=artifact.url,
            destination_dir=workspace.root,
            file_name=artifact.file_name,
            progress=self.progress,
            expected_hash=artifact.expected_hash,
            hash_algorithm=artifact.hash_algorithm,
        )

    def build_command(self) -> list[str]:
        command = [
            self.java_path,
            MIN_HEAP,
            f"-Xmx{self.spec.mem}M",
            "-jar",
            ARTIFACT_FILE_NAME,
            *self.spec.args,
        ]
        if not self.spec.gui:
            command.append(NO_GUI_FLAG)
        return command

    async def run(self, interrupt: InterruptWaiter | None = None) -> RunResult:
        if self.state is not ServerState.READY or self.workspace is None:
            raise LaunchError(f"Cannot launch a server in state '{self.state.value}'.")

        command = self.build_command()
        logger.debug("Launching %s in %s", command, self.workspace.root)
        try:
            child = await asyncio.create_subprocess_exec(
                *command, cwd=str(self.workspace.root)
            )
        except OSError as exc:
            raise LaunchError(f"Failed to start {command[0]}: {exc}") from exc

        self.state = ServerState.RUNNING
        exit_task = asyncio.create_task(child.wait(), name="mcsdk-server-exit")
        interrupt_task = asyncio.create_task(
            (interrupt or wait_for_interrupt)(), name="mcsdk-interrupt"
        )
        try:
            done, _ = await asyncio.wait(
                {exit_task, interrupt_task}, return_when=asyncio.FIRST_COMPLETED
            )
            if exit_task in done:
                self.state = ServerState.STOPPED
                returncode = exit_task.result()
                logger.debug("Server exited with code %s", returncode)
                return RunResult(state=self.state, returncode=returncode)

            failure = interrupt_task.exception()
            if failure is not None:
                self.messages.warn(
                    f"Cannot listen for interrupts ({failure}); waiting for the server to exit."
                )
                returncode = await exit_task
                self.state = ServerState.STOPPED
                return RunResult(state=self.state, returncode=returncode)

            self.messages.info("Interrupt received, stopping server.")
            with contextlib.suppress(ProcessLookupError):
                child.kill()
            returncode = await exit_task
            self.state = ServerState.KILLED
            logger.debug("Server killed, exit code %s", returncode)
            return RunResult(state=self.state, returncode=returncode)
        finally:
            if not exit_task.done():
                exit_task.cancel()
            if not interrupt_task.done():
                interrupt_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await interrupt_task
            elif not interrupt_task.cancelled():
                interrupt_task.exception()

    def start(self) -> RunResult:
        return asyncio.run(self.run())
