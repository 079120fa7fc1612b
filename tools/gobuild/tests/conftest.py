from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

import pytest
import yaml

from tools.gobuild.core.config import GoBuildConfig
from tools.gobuild.core.runner import CommandSpec, CompletedCommand, RunnerError
from tools.gobuild.core.service import ServiceRegistry


@dataclass
class FakeRunner:
    dry_run: bool = False
    fail_on: Callable[[str], bool] | None = None
    commands: list[str] = field(default_factory=list)
    cwds: list[Path | None] = field(default_factory=list)
    started: list[str] = field(default_factory=list)
    messages: list[str] = field(default_factory=list)
    terminated: int = 0

    def emit(self, message: str) -> None:
        self.messages.append(message)

    def run(self, cmd, *, cwd=None, env=None, check=True) -> CompletedCommand:
        del env
        command = cmd.render() if isinstance(cmd, CommandSpec) else cmd
        self.commands.append(command)
        self.cwds.append(cwd)
        if check and self.fail_on is not None and self.fail_on(command):
            raise RunnerError(f"command failed with exit code 1: $ {command}", command=command)
        return CompletedCommand(command, 0)

    def start(self, cmd, *, cwd=None):
        del cwd
        command = cmd.render() if isinstance(cmd, CommandSpec) else cmd
        self.started.append(command)
        return None

    def terminate_background(self, timeout: float = 10.0) -> None:
        del timeout
        self.terminated += 1


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def gopath(tmp_path: Path) -> Path:
    root = tmp_path / "go"
    (root / "src").mkdir(parents=True)
    return root


@pytest.fixture
def service_dir(gopath: Path) -> Path:
    path = gopath / "src" / "github.com" / "acme" / "widgets"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def make_service(service_dir: Path, gopath: Path):
    """Write a serverless.yml under GOPATH and return its registry and resolved config."""

    def _make(functions: dict, *, provider_runtime: str = "go1.x", options: dict | None = None):
        go_build = {"goPath": f"{gopath.resolve().as_posix()}/src/"}
        go_build.update(options or {})
        document = {
            "service": "widgets",
            "provider": {"name": "aws", "runtime": provider_runtime},
            "custom": {"go-build": go_build},
            "functions": functions,
        }
        (service_dir / "serverless.yml").write_text(
            yaml.safe_dump(document, sort_keys=False), encoding="utf-8"
        )
        registry = ServiceRegistry.load(service_dir / "serverless.yml")
        config = GoBuildConfig.from_overrides(registry.custom_options)
        return registry, config

    return _make


@pytest.fixture
def runner_factory() -> Callable[..., FakeRunner]:
    return FakeRunner
