"""
Jinja2 template support for script bodies.

Script bodies are shell, batch or PowerShell text, so the environment is
configured to leave them alone outside of placeholders:

- no HTML autoescaping
- trailing newlines are kept
- comments use ``{{/* ... */}}`` so ``${#var}`` in shell passes through

Environments are built once per ``TemplateOptions`` value and reused.
"""

import shlex
import threading
from typing import Any

from jinja2 import (
    Environment,
    StrictUndefined,
    Template,
    Undefined,
    meta,
)
from pydantic import BaseModel, ConfigDict, Field

from .env_filter import format_entry

COMMENT_START = "{{/*"
COMMENT_END = "*/}}"


class TemplateOptions(BaseModel):
    """Rendering options for ``Script.compile``."""

    model_config = ConfigDict(frozen=True)

    strict: bool = Field(
        default=False,
        description="Raise on undefined variables instead of rendering them empty",
    )
    trim_blocks: bool = Field(
        default=False, description="Drop the first newline after a block tag"
    )
    lstrip_blocks: bool = Field(
        default=False, description="Strip leading whitespace before a block tag"
    )


def shquote(value: Any) -> str:
    """Quote a value as a single POSIX shell word."""
    return shlex.quote(str(value))


def psquote(value: Any) -> str:
    """Quote a value as a PowerShell single-quoted string literal."""
    return "'" + str(value).replace("'", "''") + "'"


def env_entry(value: Any, key: str) -> str:
    """``{{ value | env_entry('KEY') }}`` -> ``KEY=value``."""
    return format_entry(key, value)


SCRIPT_FILTERS = {
    "shquote": shquote,
    "psquote": psquote,
    "env_entry": env_entry,
}

_environments: dict[TemplateOptions, Environment] = {}
_env_lock = threading.Lock()


def get_environment(options: TemplateOptions | None = None) -> Environment:
    """Return the shared Jinja2 Environment for *options*."""
    options = options or TemplateOptions()
    with _env_lock:
        env = _environments.get(options)
        if env is None:
            env = Environment(
                autoescape=False,
                keep_trailing_newline=True,
                comment_start_string=COMMENT_START,
                comment_end_string=COMMENT_END,
                trim_blocks=options.trim_blocks,
                lstrip_blocks=options.lstrip_blocks,
                undefined=StrictUndefined if options.strict else Undefined,
            )
            env.filters.update(SCRIPT_FILTERS)
            _environments[options] = env
    return env


def parse_template(source: str, options: TemplateOptions | None = None) -> Template:
    """Compile *source*. Raises ``jinja2.TemplateSyntaxError`` on bad syntax."""
    return get_environment(options).from_string(source)


def find_fields(source: str) -> list[str]:
    """Variable names used in *source* that the template does not set itself."""
    ast = get_environment().parse(source)
    return sorted(meta.find_undeclared_variables(ast))

