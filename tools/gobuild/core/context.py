"""Shared setup for go-build commands."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path

from tools.gobuild.core.config import GoBuildConfig
from tools.gobuild.core.runner import CommandRunner
from tools.gobuild.core.service import DEFAULT_SERVICE_FILE, ServiceRegistry
from tools.gobuild.plugin import GoBuildPlugin, LifecycleDriver, ProcessPluginHost


@dataclass
class CommandContext:
    registry: ServiceRegistry
    config: GoBuildConfig
    plugin: GoBuildPlugin
    driver: LifecycleDriver


def load_context(args: argparse.Namespace, runner: CommandRunner) -> CommandContext:
    """Read serverless.yml, resolve options once and wire the plugin for ``args``."""
    service_file = Path(getattr(args, "config", None) or DEFAULT_SERVICE_FILE)
    registry = ServiceRegistry.load(service_file.expanduser())
    config = GoBuildConfig.from_overrides(registry.custom_options)

    plugin = GoBuildPlugin(
        registry,
        config,
        runner,
        function=getattr(args, "function", None),
        local=bool(getattr(args, "local", False)),
        host=ProcessPluginHost(runner, config, cwd=registry.service_path),
    )
    return CommandContext(
        registry=registry,
        config=config,
        plugin=plugin,
        driver=LifecycleDriver([plugin]),
    )
