"""Executable scripts with template data and env vars.

A Script is built from a string, a file or a URL, enriched with template
fields and ``KEY=VALUE`` env vars, then compiled into final text for an
executor to run:
- models: Script
- templating: TemplateOptions and the Jinja2 environment for script bodies
- env_filter: EnvVarPolicy, process environment snapshots
- errors: ScriptError and its subclasses
"""

from .env_filter import EnvVarPolicy, environ_entries
from .errors import (
    CompileAbort,
    FileReadError,
    HTTPRequestError,
    ResponseReadError,
    ScriptError,
    TemplateExecutionError,
    TemplateParseError,
    URLParseError,
)
from .models import Script
from .templating import TemplateOptions

__all__ = [
    "Script",
    "TemplateOptions",
    "EnvVarPolicy",
    "environ_entries",
    "ScriptError",
    "FileReadError",
    "URLParseError",
    "HTTPRequestError",
    "ResponseReadError",
    "TemplateParseError",
    "TemplateExecutionError",
    "CompileAbort",
]
