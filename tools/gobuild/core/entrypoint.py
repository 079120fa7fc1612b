"""
main.go Renderer

Generate the main package that wraps an exported handler function.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


def _go_identifier(name: str) -> str:
    alias = re.sub(r"\W", "_", name)
    if not alias or alias[0].isdigit():
        alias = f"_{alias}"
    return alias


def render_main_go(
    module_path: str,
    module_name: str,
    function_name: str,
    path_to_lambda: str,
    handler: str = "",
) -> str:
    """
    Render a main.go.

    Args:
        module_path: Go import path of the package holding the handler
        module_name: short package name (last segment of module_path)
        function_name: exported function to start
        path_to_lambda: import path of aws-lambda-go/lambda
        handler: original handler string, noted in the file header
    """
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        keep_trailing_newline=True,
    )
    template = env.get_template("main.go.j2")

    context = {
        "handler": handler or f"{module_path}.{function_name}",
        "lambda_import": path_to_lambda,
        "lambda_package": _go_identifier(path_to_lambda.rstrip("/").rsplit("/", 1)[-1]),
        "module_import": module_path,
        "module_alias": _go_identifier(module_name),
        "function_name": function_name,
    }

    return template.render(context)


def write_main_go(
    out_path: Path,
    module_path: str,
    module_name: str,
    function_name: str,
    path_to_lambda: str,
    handler: str = "",
) -> Path:
    """Render and write a main.go to ``out_path``, creating parent directories."""
    content = render_main_go(module_path, module_name, function_name, path_to_lambda, handler)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        f.write(content)
    logger.debug("Wrote %s (%s.%s)", out_path, module_path, function_name)
    return out_path
