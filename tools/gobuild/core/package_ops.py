"""Point Go functions at their compiled binaries before packaging."""

from __future__ import annotations

import dataclasses

from tools.gobuild.core import logging as console
from tools.gobuild.core.build_ops import relevant_functions
from tools.gobuild.core.config import GoBuildConfig
from tools.gobuild.core.functions import derive_output_binary
from tools.gobuild.core.service import FunctionDescriptor, ServiceRegistry


def rewrite_for_packaging(func: FunctionDescriptor, config: GoBuildConfig) -> FunctionDescriptor:
    """Return a copy of ``func`` whose handler is the binary and, optionally, a minimal package."""
    handler = derive_output_binary(func, config)
    package = func.package
    if config.minimize_package and not package:
        package = {
            "exclude": ["./**"],
            "include": [f"./{handler}"],
        }
    return dataclasses.replace(func, handler=handler, package=package)


def execute_predeploy(
    registry: ServiceRegistry, config: GoBuildConfig, function: str | None = None
) -> list[FunctionDescriptor]:
    """Rewrite every relevant function and substitute it back into ``registry``."""
    console.log(f"Reassigning go paths to point to {config.bin_path}")

    rewritten = []
    for func in relevant_functions(registry, config, function):
        updated = rewrite_for_packaging(func, config)
        registry.substitute(updated)
        rewritten.append(updated)
    return rewritten
