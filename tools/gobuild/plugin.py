"""
go-build plugin wiring.

Binds the build, test and packaging phases to serverless lifecycle events and
drives them in order for a command.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Callable

from tools.gobuild.core.build_ops import BuildOptions, execute_build, execute_create_mains
from tools.gobuild.core.config import GoBuildConfig
from tools.gobuild.core.errors import TestFailure
from tools.gobuild.core.package_ops import execute_predeploy
from tools.gobuild.core.runner import CommandRunner, CommandSpec
from tools.gobuild.core.service import ServiceRegistry
from tools.gobuild.core.test_ops import PluginHost, TestRunOutcome, execute_tests

logger = logging.getLogger(__name__)

# Lifecycle events of the commands go-build hooks into
LIFECYCLE_EVENTS: dict[str, list[str]] = {
    "build": ["build"],
    "test": ["test"],
    "package": ["createDeploymentArtifacts"],
    "deploy:function": ["packageFunction"],
}


class ProcessPluginHost:
    """Starts test plugins as background processes through the runner."""

    def __init__(self, runner: CommandRunner, config: GoBuildConfig, cwd: Path | None = None):
        self.runner = runner
        self.config = config
        self.cwd = cwd
        self.spawned: list[str] = []

    def spawn(self, identifier: str) -> None:
        self.runner.start(CommandSpec(self.config.test_plugin_cmd, (identifier,)), cwd=self.cwd)
        self.spawned.append(identifier)

    def shutdown(self) -> None:
        self.runner.terminate_background()


class GoBuildPlugin:
    commands = {
        "build": {
            "usage": "Builds your go files needed for deployment",
            "lifecycleEvents": LIFECYCLE_EVENTS["build"],
            "options": {
                "local": {
                    "usage": "Build for the local machine instead of the AWS target",
                    "shortcut": "l",
                },
            },
        },
        "test": {
            "usage": "Runs your go tests",
            "lifecycleEvents": LIFECYCLE_EVENTS["test"],
        },
    }

    def __init__(
        self,
        registry: ServiceRegistry,
        config: GoBuildConfig,
        runner: CommandRunner,
        *,
        function: str | None = None,
        local: bool = False,
        host: PluginHost | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.registry = registry
        self.config = config
        self.runner = runner
        self.options = BuildOptions(function=function, local=local)
        self.host = host
        self.sleep = sleep

        self.hooks: dict[str, Callable[[], Any]] = {
            "before:build:build": self.create_mains,
            "build:build": self.build,
            "test:test": self.tests,
            "before:deploy:function:packageFunction": self.predeploy,
            "before:package:createDeploymentArtifacts": self.predeploy,
        }

    def create_mains(self):
        return execute_create_mains(self.registry, self.config, self.runner, self.options)

    def build(self):
        return execute_build(self.registry, self.config, self.runner, self.options)

    def tests(self) -> TestRunOutcome:
        try:
            return execute_tests(
                self.config,
                self.runner,
                self.host,
                cwd=self.registry.service_path,
                sleep=self.sleep,
            )
        except TestFailure as exc:
            return TestRunOutcome(success=False, message=str(exc))

    def predeploy(self):
        return execute_predeploy(self.registry, self.config, self.options.function)


class LifecycleDriver:
    """Fires before/on/after hooks for each lifecycle event of a command."""

    def __init__(self, plugins: list[GoBuildPlugin]) -> None:
        self.plugins = plugins

    def hook_names(self, command: str) -> list[str]:
        if command not in LIFECYCLE_EVENTS:
            raise ValueError(f"unknown command: {command}")
        names = []
        for event in LIFECYCLE_EVENTS[command]:
            names.extend(
                [
                    f"before:{command}:{event}",
                    f"{command}:{event}",
                    f"after:{command}:{event}",
                ]
            )
        return names

    def run(self, command: str) -> Any:
        result = None
        for name in self.hook_names(command):
            for plugin in self.plugins:
                hook = plugin.hooks.get(name)
                if hook is None:
                    continue
                logger.debug("Running hook %s", name)
                result = hook()
        return result
