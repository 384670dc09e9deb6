from pathlib import Path

import pytest

from mcsdk import cli
from mcsdk.models import RunResult, ServerState, Software


class _FakeCatalog:
    valid = True

    def __init__(self, http_client=None, messages=None):
        pass

    def validate(self, version):
        return self.valid

    def list_versions(self, release_only=True, limit=50):
        return ["1.20.4", "1.20.2"][:limit]


class _FakeServer:
    instances: list["_FakeServer"] = []
    result = RunResult(state=ServerState.STOPPED, returncode=0)

    def __init__(self, spec, **kwargs):
        self.spec = spec
        self.kwargs = kwargs
        _FakeServer.instances.append(self)

    def initialize(self, validate_version=True):
        class _Workspace:
            root = Path("/srv/mc")

        return _Workspace()

    def start(self):
        return self.result


@pytest.fixture(autouse=True)
def _fakes(monkeypatch):
    _FakeServer.instances = []
    _FakeCatalog.valid = True
    _FakeServer.result = RunResult(state=ServerState.STOPPED, returncode=0)
    monkeypatch.setattr(cli, "VersionCatalog", _FakeCatalog)
    monkeypatch.setattr(cli, "ServerProcess", _FakeServer)


def test_start_builds_spec_from_arguments(tmp_path):
    plugin = tmp_path / "a.jar"
    code = cli.main(
        [
            "start",
            "paper",
            "1.20.4",
            str(plugin),
            "-w",
            str(tmp_path),
            "-a=--port",
            "-a",
            "25570",
            "-m",
            "1024",
        ]
    )

    assert code == 0
    spec = _FakeServer.instances[0].spec
    assert spec.software is Software.PAPER
    assert spec.plugins == (plugin,)
    assert spec.working_directory == tmp_path
    assert spec.args == ("--port", "25570")
    assert spec.mem == 1024
    assert spec.gui is False


def test_start_defaults_to_ephemeral_workspace():
    assert cli.main(["start", "spigot", "1.20.4"]) == 0
    spec = _FakeServer.instances[0].spec
    assert spec.working_directory is None
    assert spec.mem == 2048


def test_start_exits_1_on_invalid_version():
    _FakeCatalog.valid = False
    assert cli.main(["start", "paper", "20.4"]) == 1
    assert _FakeServer.instances == []


def test_start_exits_0_after_interrupt():
    _FakeServer.result = RunResult(state=ServerState.KILLED, returncode=-9)
    assert cli.main(["start", "paper", "1.20.4"]) == 0


def test_start_propagates_server_exit_code():
    _FakeServer.result = RunResult(state=ServerState.STOPPED, returncode=2)
    assert cli.main(["start", "paper", "1.20.4"]) == 2


def test_list_prints_versions(capsys):
    assert cli.main(["list", "--limit", "1"]) == 0
    assert capsys.readouterr().out.split() == ["1.20.4"]


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 0
    assert "usage" in capsys.readouterr().out


def test_verbose_flag_is_accepted_after_subcommand_arguments():
    assert cli.main(["start", "paper", "1.20.4", "-v"]) == 0
    assert cli.main(["list", "--verbose"]) == 0


def test_start_maps_signal_exit_to_shell_status():
    _FakeServer.result = RunResult(state=ServerState.STOPPED, returncode=-9)
    assert cli.main(["start", "paper", "1.20.4"]) == 137


@pytest.mark.parametrize("returncode, expected", [(None, 0), (0, 0), (3, 3), (-15, 143)])
def test_exit_status(returncode, expected):
    assert cli.exit_status(returncode) == expected
