"""Command execution helpers for go-build phases."""

from __future__ import annotations

import os
import re
import signal
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Sequence

_PLACEHOLDER = re.compile(r"%(\d+)")


def format_template(template: str, args: Sequence[str]) -> str:
    """Substitute 1-based ``%N`` placeholders; unknown indexes are left as-is."""

    def _replace(match: re.Match[str]) -> str:
        index = int(match.group(1)) - 1
        if 0 <= index < len(args):
            return str(args[index])
        return match.group(0)

    return _PLACEHOLDER.sub(_replace, template)


@dataclass(frozen=True)
class CommandSpec:
    """A command template plus its positional arguments, rendered at execution time."""

    template: str
    args: tuple[str, ...] = ()
    prefix: str = ""

    def render(self) -> str:
        return self.prefix + format_template(self.template, self.args)


@dataclass(frozen=True)
class CompletedCommand:
    """Normalized command execution result."""

    cmd: str
    returncode: int
    stdout: str = ""
    stderr: str = ""


class RunnerError(RuntimeError):
    """Raised when a command execution fails."""

    def __init__(self, message: str, command: str = "") -> None:
        super().__init__(message)
        self.command = command


class CommandRunner:
    """Shell command wrapper with dry-run support and deterministic logging."""

    def __init__(
        self,
        *,
        dry_run: bool = False,
        printer: Callable[[str], None] | None = None,
    ) -> None:
        self.dry_run = dry_run
        self._printer = printer or print
        self._background: list[subprocess.Popen[str]] = []

    def format_cmd(self, cmd: CommandSpec | str) -> str:
        rendered = cmd.render() if isinstance(cmd, CommandSpec) else cmd
        return "$ " + rendered

    def emit(self, message: str) -> None:
        self._printer(message)

    def run(
        self,
        cmd: CommandSpec | str,
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
    ) -> CompletedCommand:
        """Run ``cmd`` through the shell, passing stdout/stderr through."""
        command = cmd.render() if isinstance(cmd, CommandSpec) else cmd
        rendered = self.format_cmd(command)
        if self.dry_run:
            self.emit(f"[dry-run] {rendered}")
            return CompletedCommand(command, 0)

        run_env = os.environ.copy()
        if env:
            run_env.update({str(key): str(value) for key, value in env.items()})

        completed = subprocess.run(
            command,
            shell=True,
            cwd=str(cwd) if cwd else None,
            env=run_env,
            stdin=subprocess.DEVNULL,
            text=True,
            check=False,
        )
        if check and completed.returncode != 0:
            raise RunnerError(
                f"command failed with exit code {completed.returncode}: {rendered}",
                command=command,
            )
        return CompletedCommand(command, completed.returncode)

    def start(
        self,
        cmd: CommandSpec | str,
        *,
        cwd: Path | None = None,
    ) -> subprocess.Popen[str] | None:
        """Start ``cmd`` in the background; it is stopped by ``terminate_background``."""
        command = cmd.render() if isinstance(cmd, CommandSpec) else cmd
        rendered = self.format_cmd(command)
        if self.dry_run:
            self.emit(f"[dry-run] {rendered} &")
            return None

        self.emit(f"{rendered} &")
        proc = subprocess.Popen(
            command,
            shell=True,
            cwd=str(cwd) if cwd else None,
            stdin=subprocess.DEVNULL,
            text=True,
            start_new_session=True,
        )
        self._background.append(proc)
        return proc

    def terminate_background(self, timeout: float = 10.0) -> None:
        """Stop every background command together with the processes it spawned."""
        while self._background:
            proc = self._background.pop()
            _signal_group(proc, signal.SIGTERM)
            try:
                proc.wait(timeout=timeout)
            except subprocess.TimeoutExpired:
                _signal_group(proc, signal.SIGKILL)
                proc.wait()


def _signal_group(proc: subprocess.Popen[str], sig: int) -> None:
    # Background commands lead their own session, so the pid is also the group id.
    try:
        os.killpg(proc.pid, sig)
    except ProcessLookupError:
        pass
