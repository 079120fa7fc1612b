"""
Function selection and entry-point resolution.

Handlers come in two shapes:

    path/to/file.go          a Go main package, compiled directly
    path/to/module.Function  an exported function of a package; a main.go
                             calling it is generated under generatedMainPath

Everything here is pure: no filesystem access and no environment lookups.
"""

from __future__ import annotations

import dataclasses
import posixpath
import re
from dataclasses import dataclass
from typing import Callable, Iterable

from tools.gobuild.core.config import GoBuildConfig
from tools.gobuild.core.errors import ConfigurationError
from tools.gobuild.core.service import FunctionDescriptor

SOURCE_SUFFIX = "go"
GENERATED_MAIN_FILE = "main.go"

_HANDLER_PATTERN = re.compile(r"^(.*?)\.([^.]*)$", re.DOTALL)


@dataclass(frozen=True)
class EntryPointSpec:
    """A function whose handler names an exported symbol and needs a generated main.go."""

    func: FunctionDescriptor
    public_function_name: str
    module_path: str
    module_name: str
    main_path: str


def rewrite_bin_path_handler(handler: str, bin_path: str) -> str:
    """Turn ``<binPath>/foo/bar`` back into ``foo/bar.go``."""
    return handler[len(bin_path) + 1 :] + f".{SOURCE_SUFFIX}"


def is_target_runtime(
    func: FunctionDescriptor, target_runtime: str, provider_runtime: str | None
) -> bool:
    """Functions without a runtime inherit the provider's."""
    if provider_runtime == target_runtime:
        return not func.runtime or func.runtime == target_runtime
    return bool(func.runtime) and func.runtime == target_runtime


def select_functions(
    all_function_names: Iterable[str],
    get_function: Callable[[str], FunctionDescriptor],
    provider_runtime: str | None,
    config: GoBuildConfig,
    requested_name: str | None = None,
) -> list[FunctionDescriptor]:
    """
    Return the functions to build, in declaration order.

    Args:
        all_function_names: every declared function name
        get_function: fetches a descriptor by name
        provider_runtime: the project's default runtime
        config: resolved go-build options
        requested_name: restrict to this single function
    """
    if requested_name:
        names = [requested_name]
    else:
        names = list(all_function_names)

    functions = [get_function(name) for name in names]

    if config.use_bin_path_for_handler:
        functions = [
            dataclasses.replace(
                func, handler=rewrite_bin_path_handler(func.handler or "", config.bin_path)
            )
            for func in functions
        ]

    return [
        func for func in functions if is_target_runtime(func, config.runtime, provider_runtime)
    ]


def classify(
    func: FunctionDescriptor | None, generated_main_path: str
) -> EntryPointSpec | None:
    """Return the entry-point spec for ``func``, or None when no main.go is needed."""
    if not func or not func.handler:
        return None

    matched = _HANDLER_PATTERN.match(func.handler)
    if not matched or not matched.group(2):
        return None

    module_path = matched.group(1)
    public_function_name = matched.group(2)

    # A .go handler is already a main package
    if public_function_name == SOURCE_SUFFIX:
        return None

    module_name = re.sub(r"^.*[\\/]", "", module_path)
    main_path = posixpath.normpath(
        posixpath.join(generated_main_path, module_path, public_function_name, GENERATED_MAIN_FILE)
    )

    return EntryPointSpec(
        func=func,
        public_function_name=public_function_name,
        module_path=module_path,
        module_name=module_name,
        main_path=main_path,
    )


def validate_module_path(full_module_path: str, workspace_root: str) -> str:
    """Return ``full_module_path`` relative to ``workspace_root`` (the Go import path)."""
    if not full_module_path.startswith(workspace_root):
        raise ConfigurationError(
            "Module path not in GOPATH - set goPath in go-build config if needed"
        )
    return full_module_path[len(workspace_root) :]


def derive_output_binary(func: FunctionDescriptor, config: GoBuildConfig) -> str:
    """Binary path the compiler writes for ``func``."""
    outputbin = re.sub(rf"\.{SOURCE_SUFFIX}$", "", func.handler or "")
    return posixpath.normpath(posixpath.join(config.bin_path, outputbin))
