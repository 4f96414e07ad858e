"""Script value type.

A Script is an executable string plus the data needed to run it: template
fields and ``KEY=VALUE`` env vars. Template placeholders stand in for
script arguments, which are awkward to pass on some platforms the script
may be executed on.

Scripts are frozen. Every builder returns a new Script that owns its own
copy of ``data`` and ``env``.
"""

from __future__ import annotations

import copy
import logging
import os
from collections.abc import Mapping
from typing import Any

import httpx
from jinja2 import TemplateSyntaxError
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from . import loaders
from .env_filter import EnvVarPolicy, environ_entries
from .errors import (
    CompileAbort,
    ScriptError,
    TemplateExecutionError,
    TemplateParseError,
)
from .templating import TemplateOptions, find_fields, parse_template

logger = logging.getLogger(__name__)


class Script(BaseModel):
    """Executable string with template data and env vars."""

    model_config = ConfigDict(frozen=True)

    raw: str = Field(default="", description="Executable text, possibly templated")
    data: dict[str, Any] = Field(
        default_factory=dict, description="Template fields used by compile()"
    )
    env: list[str] = Field(
        default_factory=list, description="Env vars in KEY=VALUE format"
    )

    @field_validator("data", "env", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return {} if info.field_name == "data" else []
        return value

    # -- Construction ----------------------------------------------------------

    @classmethod
    def from_string(cls, raw: str) -> Script:
        """Create a script from the raw executable string."""
        return cls(raw=raw)

    @classmethod
    def from_file(cls, path: str | os.PathLike[str], encoding: str = "utf-8") -> Script:
        """Create a script from the contents of a file.

        Raises FileReadError if the file can not be read.
        """
        return cls(raw=loaders.read_file(path, encoding=encoding))

    @classmethod
    def from_url(
        cls,
        link: str,
        *,
        client: httpx.Client | None = None,
        timeout: float | None = None,
        check_status: bool = False,
        transport: httpx.BaseTransport | None = None,
    ) -> Script:
        """Create a script from the body of an HTTP GET on *link*.

        The status code is not checked unless ``check_status`` is set, so an
        error page is returned as the script body. Redirects are followed when
        no *client* is given. See ``loaders.fetch_url`` for the errors raised.
        """
        body = loaders.fetch_url(
            link,
            client=client,
            timeout=timeout,
            check_status=check_status,
            transport=transport,
        )
        return cls(raw=body)

    # -- Builders --------------------------------------------------------------

    def _derive(self, **changes: Any) -> Script:
        """New Script with *changes* applied; other containers are copied."""
        changes.setdefault("raw", self.raw)
        if "data" not in changes:
            changes["data"] = copy.deepcopy(self.data)
        if "env" not in changes:
            changes["env"] = list(self.env)
        return type(self)(**changes)

    def with_field(self, key: str, value: Any) -> Script:
        """Set a template field, overwriting any existing value for *key*."""
        return self.with_fields({key: value}, overwrite=True)

    def with_fields(self, fields: Mapping[str, Any], overwrite: bool = False) -> Script:
        """Merge *fields* into the template data.

        Keys already present are only replaced when *overwrite* is true.
        """
        data = copy.deepcopy(self.data)
        for key, value in fields.items():
            if overwrite or key not in data:
                data[key] = copy.deepcopy(value)
        return self._derive(data=data)

    def with_env(self, *entries: str) -> Script:
        """Append env vars in KEY=VALUE format. Entries are not validated."""
        return self._derive(env=[*self.env, *entries])

    def with_os_env(
        self, policy: EnvVarPolicy | str = EnvVarPolicy.INHERIT_ALL
    ) -> Script:
        """Append a snapshot of the process environment to the env vars."""
        return self.with_env(*environ_entries(policy))

    # -- Compilation -----------------------------------------------------------

    def template_fields(self) -> list[str]:
        """Names of the template variables referenced by the raw string."""
        try:
            return find_fields(self.raw)
        except TemplateSyntaxError as exc:
            raise TemplateParseError(
                f"failed to parse the script: {exc}", script=self
            ) from exc

    def compile(self, options: TemplateOptions | None = None) -> Script:
        """Render the raw string against the template data.

        Returns a new Script holding the rendered text and empty data. On
        failure the error's ``script`` attribute is this unchanged Script.
        """
        logger.debug(
            "script: compiling %d chars with %d fields", len(self.raw), len(self.data)
        )
        try:
            template = parse_template(self.raw, options)
        except TemplateSyntaxError as exc:
            raise TemplateParseError(
                f"failed to parse the script: {exc}", script=self
            ) from exc
        try:
            compiled = template.render(self.data)
        except Exception as exc:
            raise TemplateExecutionError(
                f"script template could not be compiled: {exc}", script=self
            ) from exc
        return self._derive(raw=compiled, data={})

    def must_compile(self, options: TemplateOptions | None = None) -> Script:
        """Compile, turning any failure into a CompileAbort.

        For templates known to be valid at the call site.
        """
        try:
            return self.compile(options)
        except ScriptError as exc:
            logger.critical("script: compile failed: %s", exc)
            raise CompileAbort(exc) from exc
