"""Error types raised by the go-build phases."""

from __future__ import annotations


class GoBuildError(RuntimeError):
    """Base class for failures that halt a build, test or packaging phase."""


class ConfigurationError(GoBuildError):
    """Raised for malformed configuration or module paths outside the workspace root."""


class GenerationFailure(GoBuildError):
    """Raised when a generated main.go could not be written."""


class CompileFailure(GoBuildError):
    """Raised when the external compiler exits non-zero."""


class TestFailure(GoBuildError):
    """Raised when the external test runner exits non-zero."""

    __test__ = False
