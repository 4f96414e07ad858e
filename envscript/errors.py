"""Error taxonomy for script construction and compilation.

Two groups:
- load errors: the script body could not be obtained (file, URL, HTTP, body)
- template errors: the body could not be parsed or rendered

Every error keeps its underlying cause through exception chaining.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import Script


class ScriptError(Exception):
    """Base class for all envscript errors."""

    error_code = "script_error"

    def __init__(self, message: str, *, script: Script | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.script = script

    def to_dict(self) -> dict[str, Any]:
        """Structured form for reporting to callers that log or serialize errors."""
        cause = self.__cause__
        return {
            "error_code": self.error_code,
            "message": self.message,
            "cause": f"{type(cause).__name__}: {cause}" if cause is not None else None,
        }


class FileReadError(ScriptError):
    error_code = "file_read_failed"


class URLParseError(ScriptError):
    error_code = "url_parse_failed"


class HTTPRequestError(ScriptError):
    error_code = "http_request_failed"


class ResponseReadError(ScriptError):
    error_code = "response_read_failed"


class TemplateParseError(ScriptError):
    error_code = "template_parse_failed"


class TemplateExecutionError(ScriptError):
    error_code = "template_execution_failed"


class CompileAbort(BaseException):
    """Raised by ``Script.must_compile`` when compilation fails.

    Derives from BaseException so ``except Exception`` blocks let it through,
    the same way they let SystemExit and KeyboardInterrupt through.
    """

    def __init__(self, error: ScriptError) -> None:
        super().__init__(str(error))
        self.error = error
