"""
serverless.yml reader.

Exposes the declared functions, the provider default runtime and the
``custom.go-build`` overrides. CloudFormation short-form tags that appear
under ``resources`` are loaded as ``CfnTag`` values and written back with
their original tag by ``ServiceRegistry.dump``.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from tools.gobuild.core.config import CONFIG_SECTION
from tools.gobuild.core.errors import ConfigurationError

DEFAULT_SERVICE_FILE = "serverless.yml"

CFN_TAGS = ["!Ref", "!Sub", "!GetAtt", "!ImportValue", "!If", "!Join", "!Select", "!Split"]


@dataclass(frozen=True)
class CfnTag:
    """A CloudFormation intrinsic function call, e.g. ``!GetAtt Table.Arn``."""

    tag: str
    value: Any


class CfnLoader(yaml.SafeLoader):
    """YAML loader that handles CloudFormation intrinsic functions."""

    pass


class CfnDumper(yaml.SafeDumper):
    """YAML dumper that writes CfnTag values back in short form."""

    pass


def cfn_constructor(loader: yaml.Loader, node: yaml.Node) -> CfnTag:
    """Constructor for CloudFormation tags."""
    if isinstance(node, yaml.ScalarNode):
        value: Any = loader.construct_scalar(node)
    elif isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node, deep=True)
    else:
        value = loader.construct_mapping(node, deep=True)
    return CfnTag(node.tag, value)


def cfn_representer(dumper: yaml.SafeDumper, data: CfnTag) -> yaml.Node:
    if isinstance(data.value, list):
        return dumper.represent_sequence(data.tag, data.value)
    if isinstance(data.value, dict):
        return dumper.represent_mapping(data.tag, data.value)
    return dumper.represent_scalar(data.tag, str(data.value))


# Register CloudFormation tags.
for tag in CFN_TAGS:
    yaml.add_constructor(tag, cfn_constructor, Loader=CfnLoader)
yaml.add_representer(CfnTag, cfn_representer, Dumper=CfnDumper)


@dataclass(frozen=True)
class FunctionDescriptor:
    """One declared function as seen by the build phases."""

    name: str
    handler: str | None
    runtime: str | None = None
    package: dict[str, Any] | None = None

    @classmethod
    def from_mapping(cls, name: str, props: dict[str, Any] | None) -> "FunctionDescriptor":
        props = props or {}
        package = props.get("package")
        return cls(
            name=name,
            handler=props.get("handler"),
            runtime=props.get("runtime"),
            package=copy.deepcopy(package) if package else None,
        )


class ServiceRegistry:
    """In-memory view of a serverless.yml document."""

    def __init__(self, data: dict[str, Any] | None, service_path: Path | str) -> None:
        self._data = data or {}
        self.service_path = Path(service_path)

    @classmethod
    def load(cls, path: Path | str) -> "ServiceRegistry":
        service_file = Path(path)
        if service_file.is_dir():
            service_file = service_file / DEFAULT_SERVICE_FILE
        if not service_file.exists():
            raise FileNotFoundError(f"serverless config not found: {service_file}")
        with open(service_file, encoding="utf-8") as f:
            data = yaml.load(f, Loader=CfnLoader)
        if data is not None and not isinstance(data, dict):
            raise ConfigurationError(f"serverless config must be a mapping: {service_file}")
        return cls(data, service_file.resolve().parent)

    @property
    def data(self) -> dict[str, Any]:
        return self._data

    def _functions(self) -> dict[str, Any]:
        return self._data.get("functions") or {}

    def get_all_functions(self) -> list[str]:
        """Function names in declaration order."""
        return list(self._functions().keys())

    def get_function(self, name: str) -> FunctionDescriptor:
        functions = self._functions()
        if name not in functions:
            raise ConfigurationError(f"Function \"{name}\" doesn't exist in this Service")
        return FunctionDescriptor.from_mapping(name, functions[name])

    @property
    def provider_runtime(self) -> str | None:
        return (self._data.get("provider") or {}).get("runtime")

    @property
    def custom_options(self) -> dict[str, Any]:
        return (self._data.get("custom") or {}).get(CONFIG_SECTION) or {}

    def substitute(self, descriptor: FunctionDescriptor) -> None:
        """Write a rewritten descriptor's handler and package back into the document."""
        functions = self._functions()
        if descriptor.name not in functions:
            raise ConfigurationError(
                f"Function \"{descriptor.name}\" doesn't exist in this Service"
            )
        props = functions[descriptor.name]
        if props is None:
            props = functions[descriptor.name] = {}
        props["handler"] = descriptor.handler
        if descriptor.package is not None:
            props["package"] = copy.deepcopy(descriptor.package)

    def dump(self) -> str:
        return yaml.dump(self._data, Dumper=CfnDumper, sort_keys=False, allow_unicode=True)
