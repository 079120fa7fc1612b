"""
go-build configuration.

Options are read from ``custom.go-build`` in serverless.yml. Every recognized
option has a default, so a missing section, a missing key or an explicit
``null`` all resolve to a usable value.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

CONFIG_SECTION = "go-build"

DEFAULT_OPTIONS: dict[str, Any] = {
    # Prefix used for building for AWS
    "awsbuildPrefix": "GOOS=linux ",
    # Build command, %1 is the input path and %2 the output binary
    "buildCmd": 'go build -ldflags="-s -w" -o %2 %1',
    # Test command, %1 is one entry of "tests"
    "testCmd": "stage=testing GO_TEST=serverless go test -v %1",
    "binPath": "bin",
    "runtime": "go1.x",
    # Imported by every generated main.go
    "pathToAWSLambda": "github.com/aws/aws-lambda-go/lambda",
    "generatedMainPath": "generatedEntrypoints",
    # Must point at the /src segment of GOPATH (defaults to $GOPATH/src/)
    "goPath": None,
    "useBinPathForHandler": False,
    "minimizePackage": True,
    "testPlugins": [],
    # Milliseconds between starting test plugins and starting tests
    "testStartDelay": 0,
    "tests": [],
    # Starts one test plugin, %1 is the plugin identifier
    "testPluginCmd": "serverless %1",
}


def resolve_option(overrides: Mapping[str, Any] | None, option: str) -> Any:
    """Return the user value for ``option`` or its default."""
    if overrides is not None:
        value = overrides.get(option)
        if value is not None:
            return value
    return DEFAULT_OPTIONS.get(option)


def default_go_path(env: Mapping[str, str] | None = None) -> str:
    """Workspace root derived from GOPATH, falling back to the Go default ~/go."""
    source = os.environ if env is None else env
    gopath = (source.get("GOPATH", "") or "").strip()
    if gopath == "":
        gopath = str(Path.home() / "go")
    return f"{gopath}/src/"


class GoBuildConfig(BaseModel):
    """Resolved options for one invocation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    awsbuild_prefix: str = Field(alias="awsbuildPrefix")
    build_cmd: str = Field(alias="buildCmd")
    test_cmd: str = Field(alias="testCmd")
    bin_path: str = Field(alias="binPath")
    runtime: str = Field(alias="runtime")
    path_to_aws_lambda: str = Field(alias="pathToAWSLambda")
    generated_main_path: str = Field(alias="generatedMainPath")
    go_path: str = Field(alias="goPath")
    use_bin_path_for_handler: bool = Field(alias="useBinPathForHandler")
    minimize_package: bool = Field(alias="minimizePackage")
    test_plugins: list[str] = Field(alias="testPlugins")
    test_start_delay: float = Field(alias="testStartDelay", ge=0)
    tests: list[str] = Field(alias="tests")
    test_plugin_cmd: str = Field(alias="testPluginCmd")

    @classmethod
    def from_overrides(
        cls,
        overrides: Mapping[str, Any] | None = None,
        env: Mapping[str, str] | None = None,
    ) -> "GoBuildConfig":
        values = {option: resolve_option(overrides, option) for option in DEFAULT_OPTIONS}
        if not values["goPath"]:
            values["goPath"] = default_go_path(env)
        return cls.model_validate(values)

    def resolve(self, option: str) -> Any:
        """Look up a resolved value by its serverless.yml option name."""
        for name, field in type(self).model_fields.items():
            if field.alias == option:
                return getattr(self, name)
        raise KeyError(option)
