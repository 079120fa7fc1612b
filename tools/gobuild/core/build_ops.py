"""main.go generation and Go build orchestration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from tools.gobuild.core import logging as console
from tools.gobuild.core.config import GoBuildConfig
from tools.gobuild.core.entrypoint import write_main_go
from tools.gobuild.core.errors import CompileFailure, ConfigurationError, GenerationFailure
from tools.gobuild.core.functions import (
    EntryPointSpec,
    classify,
    derive_output_binary,
    select_functions,
    validate_module_path,
)
from tools.gobuild.core.runner import CommandRunner, CommandSpec, CompletedCommand, RunnerError
from tools.gobuild.core.service import FunctionDescriptor, ServiceRegistry

logger = logging.getLogger(__name__)

MainWriter = Callable[..., Path]


@dataclass(frozen=True)
class BuildOptions:
    function: str | None = None
    local: bool = False


@dataclass(frozen=True)
class BuildStep:
    func: FunctionDescriptor
    command: CommandSpec
    entrypoint: EntryPointSpec | None = None


def relevant_functions(
    registry: ServiceRegistry, config: GoBuildConfig, function: str | None = None
) -> list[FunctionDescriptor]:
    return select_functions(
        registry.get_all_functions(),
        registry.get_function,
        registry.provider_runtime,
        config,
        requested_name=function,
    )


def plan_build(
    functions: list[FunctionDescriptor], config: GoBuildConfig, *, local: bool = False
) -> list[BuildStep]:
    """One build command per function, in the given order."""
    prefix = "" if local else config.awsbuild_prefix
    steps = []
    for func in functions:
        entrypoint = classify(func, config.generated_main_path)
        main_path = entrypoint.main_path if entrypoint else func.handler
        command = CommandSpec(
            template=config.build_cmd,
            args=(main_path, derive_output_binary(func, config)),
            prefix=prefix,
        )
        steps.append(BuildStep(func=func, command=command, entrypoint=entrypoint))
    return steps


def execute_create_mains(
    registry: ServiceRegistry,
    config: GoBuildConfig,
    runner: CommandRunner,
    options: BuildOptions | None = None,
    writer: MainWriter | None = None,
) -> list[Path]:
    """Generate main.go for every function whose handler names a package function."""
    options = options or BuildOptions()
    writer = writer or write_main_go
    functions = relevant_functions(registry, config, options.function)

    entrypoints = []
    for func in functions:
        entrypoint = classify(func, config.generated_main_path)
        if entrypoint:
            entrypoints.append(entrypoint)

    if not entrypoints:
        return []

    console.log("Creating main functions for modules")
    service_path = registry.service_path.as_posix()
    written = []
    for entrypoint in entrypoints:
        full_module_path = f"{service_path}/{entrypoint.module_path}"
        try:
            module_path = validate_module_path(full_module_path, config.go_path)
        except ConfigurationError as exc:
            console.error(str(exc))
            raise

        out_path = registry.service_path / entrypoint.main_path
        if runner.dry_run:
            runner.emit(
                f"[dry-run] generate {out_path} "
                f"({module_path}.{entrypoint.public_function_name})"
            )
            written.append(out_path)
            continue

        try:
            writer(
                out_path,
                module_path,
                entrypoint.module_name,
                entrypoint.public_function_name,
                config.path_to_aws_lambda,
                handler=entrypoint.func.handler or "",
            )
        except OSError as exc:
            console.error(str(exc))
            raise GenerationFailure(f"Go build failure: could not write {out_path}") from exc
        written.append(out_path)

    return written


def execute_build(
    registry: ServiceRegistry,
    config: GoBuildConfig,
    runner: CommandRunner,
    options: BuildOptions | None = None,
) -> list[CompletedCommand]:
    """Compile every relevant function; the first failure stops the rest."""
    options = options or BuildOptions()
    console.log("Beginning Go build")

    functions = relevant_functions(registry, config, options.function)
    results = []
    for step in plan_build(functions, config, local=options.local):
        build_cmd = step.command.render()
        console.log(build_cmd)
        try:
            results.append(runner.run(step.command, cwd=registry.service_path))
        except RunnerError as exc:
            console.error(
                f"Error building golang file at {step.func.handler}\n"
                "To replicate please run:\n"
                f"{build_cmd}\n"
            )
            raise CompileFailure(f"Go build failure: {build_cmd}") from exc
        logger.debug("Built %s", step.func.name)

    return results
