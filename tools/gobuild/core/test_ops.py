"""Go test orchestration."""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Protocol

from tools.gobuild.core import logging as console
from tools.gobuild.core.config import GoBuildConfig
from tools.gobuild.core.errors import TestFailure
from tools.gobuild.core.runner import CommandRunner, CommandSpec, RunnerError

NO_TESTS_WARNING = (
    "No tests to run - add tests to custom.go-build.tests in your serverless file."
)
SUCCESS_MESSAGE = "Tests successfully exited"


class PluginHost(Protocol):
    def spawn(self, identifier: str) -> None: ...

    def shutdown(self) -> None: ...


@dataclass(frozen=True)
class TestRunOutcome:
    """Result handed back to the lifecycle driver, which decides how to exit."""

    __test__ = False

    success: bool
    message: str
    tests_run: tuple[str, ...] = ()

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1


def execute_tests(
    config: GoBuildConfig,
    runner: CommandRunner,
    host: PluginHost | None = None,
    *,
    cwd: Path | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> TestRunOutcome:
    """
    Start test plugins, wait testStartDelay, then run each configured test in order.

    Raises TestFailure on the first failing test; plugins are shut down either way.
    """
    console.log("Running Go tests")

    tests = list(config.tests)
    if not tests:
        console.warning(NO_TESTS_WARNING)
        console.log(SUCCESS_MESSAGE)
        return TestRunOutcome(success=True, message=SUCCESS_MESSAGE)

    completed: list[str] = []
    try:
        if host is not None:
            for plugin in config.test_plugins:
                host.spawn(plugin)
        if config.test_start_delay:
            sleep(config.test_start_delay / 1000.0)

        for test in tests:
            command = CommandSpec(template=config.test_cmd, args=(test,))
            test_cmd = command.render()
            try:
                runner.run(command, cwd=cwd)
            except RunnerError as exc:
                console.error(
                    f"Error running test on {test}\n"
                    "To replicate please run:\n"
                    f"{test_cmd}\n"
                )
                raise TestFailure(f"Go test failure: {test_cmd}") from exc
            completed.append(test)
    finally:
        if host is not None:
            host.shutdown()

    console.log(SUCCESS_MESSAGE)
    return TestRunOutcome(success=True, message=SUCCESS_MESSAGE, tests_run=tuple(completed))
