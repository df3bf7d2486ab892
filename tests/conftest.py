"""Shared fixtures for ssh-ident tests."""

import io
import socket
from pathlib import Path

import pytest
from rich.console import Console

from ssh_ident import utils
from ssh_ident.core.config_loader import IdentConfig
from ssh_ident.logger import IdentLogger
from ssh_ident.models.results import ExecutionResult


class FakeRunner:
    """Stands in for utils.run_command; answers ssh-add/ssh-keygen/ssh-agent."""

    def __init__(self):
        self.calls = []
        self.probe_status = 0
        self.list_status = 0
        self.loaded = []
        self.fingerprints = {}
        self.add_status = 0
        self.streams = []

    def __call__(self, cmd, stdin=None, stdout=None, capture=True):
        self.calls.append(list(cmd))
        self.streams.append((stdin, stdout, capture))
        script = cmd[-1]

        if cmd[0] == "ssh-keygen":
            key = cmd[-1]
            if key not in self.fingerprints:
                return ExecutionResult(returncode=1, stderr="not a key file")
            return ExecutionResult(
                returncode=0, stdout=f"256 {self.fingerprints[key]} comment (ED25519)\n"
            )
        if cmd[0] == "/usr/bin/env":
            return ExecutionResult(returncode=0)
        if script.endswith("ssh-add -l >/dev/null 2>/dev/null"):
            return ExecutionResult(returncode=self.probe_status)
        if script.endswith("ssh-add -l"):
            if self.list_status:
                return ExecutionResult(returncode=self.list_status)
            lines = [f"256 {fp} user@host (ED25519)" for fp in self.loaded]
            return ExecutionResult(returncode=0, stdout="\n".join(lines) + "\n")
        if "ssh-add " in script:
            return ExecutionResult(returncode=self.add_status)
        raise AssertionError(f"unexpected command: {cmd}")

    def commands_containing(self, text):
        return [cmd for cmd in self.calls if any(text in part for part in cmd)]


@pytest.fixture
def home(tmp_path, monkeypatch) -> Path:
    """Isolated home directory."""
    home = tmp_path / "home"
    (home / ".ssh").mkdir(parents=True)
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def environ(home, tmp_path):
    """Environment for an invocation by user alice."""
    bindir = tmp_path / "bin"
    bindir.mkdir()
    return {"HOME": str(home), "USER": "alice", "PATH": str(bindir)}


@pytest.fixture
def make_config(environ):
    def _make(**overrides):
        env = dict(environ)
        env.update(overrides)
        return IdentConfig(env).load()

    return _make


@pytest.fixture
def config(make_config):
    return make_config()


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def logger(config, output):
    console = Console(file=output, width=200, highlight=False)
    return IdentLogger(config, console=console, error_console=console)


@pytest.fixture
def runner(monkeypatch) -> FakeRunner:
    fake = FakeRunner()
    monkeypatch.setattr(utils, "run_command", fake)
    monkeypatch.setattr(utils, "get_session_tty", lambda: None)
    return fake


@pytest.fixture
def agent_file(home) -> Path:
    """Agent file for alice on this host, as ssh-agent would write it."""
    agents = home / ".ssh" / "agents"
    agents.mkdir(mode=0o700)
    path = agents / f"agent-alice-{socket.gethostname()}"
    path.write_text(
        "SSH_AUTH_SOCK=/tmp/ssh-XXXX/agent.1; export SSH_AUTH_SOCK;\n"
        "SSH_AGENT_PID=2; export SSH_AGENT_PID;\n"
    )
    return path


def make_executable(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\nexit 0\n")
    path.chmod(0o755)
    return path
