"""Jinja2 environment used to compile generated templates."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from jinja2 import Environment, StrictUndefined, Undefined

from gilt.config import GiltConfig


def get_gilt_jinja_env(
    config: Optional[GiltConfig] = None,
    helpers: Optional[Dict[str, Callable[..., Any]]] = None,
) -> Environment:
    """Create the Jinja2 Environment that consumes gilt output.

    Args:
        config: Delimiters and environment switches. Defaults if omitted.
        helpers: Callables exposed to templates as globals.

    Returns:
        Configured Jinja2 Environment.

    Example:
        env = get_gilt_jinja_env(helpers={"upper": str.upper})
        env.from_string("<p>{{ upper(name) }}</p>").render(name="x")
    """
    config = config or GiltConfig()

    env = Environment(
        variable_start_string=config.variable_start,
        variable_end_string=config.variable_end,
        block_start_string=config.block_start,
        block_end_string=config.block_end,
        autoescape=config.autoescape,
        undefined=StrictUndefined if config.strict_undefined else Undefined,
        keep_trailing_newline=True,
    )

    if helpers:
        env.globals.update(helpers)

    return env
