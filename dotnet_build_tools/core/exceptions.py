"""Error types raised by the build tools.

Every error carries a message plus a ``details`` dict describing the
failing URL, command or payload; the CLI prints ``str(error)``.
"""


class BuildToolsError(Exception):
    """Base class; catching it covers every failure of a build step."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        shown = {k: v for k, v in self.details.items() if v is not None}
        if shown:
            return f"{self.message} | Details: {shown}"
        return self.message


class ParseError(BuildToolsError):
    """Remote payload could not be interpreted."""

    def __init__(self, message: str, payload: str | None = None):
        super().__init__(
            message,
            details={"payload": payload[:200]} if payload else None,
        )
        self.payload = payload


class NoMatchError(BuildToolsError):
    """No installable SDK channel matched the requested versions."""

    def __init__(self, message: str, requested: list[str] | None = None):
        super().__init__(message, details={"requested": requested or []})
        self.requested = requested or []


class HttpError(BuildToolsError):
    """Error while fetching a remote resource."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message, details={"url": url, "status_code": status_code})
        self.url = url
        self.status_code = status_code


class ProcessError(BuildToolsError):
    """External command exited with a non-zero code."""

    def __init__(
        self,
        message: str,
        command: str | None = None,
        exit_code: int | None = None,
    ):
        super().__init__(
            message,
            details={"command": command, "exit_code": exit_code},
        )
        self.command = command
        self.exit_code = exit_code


class GitHubError(BuildToolsError):
    """A GitHub REST call failed or returned an error status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(
            message,
            details={"status_code": status_code, "response_body": response_body},
        )
        self.status_code = status_code
        self.response_body = response_body


class GitOperationError(BuildToolsError):
    """A git clone, checkout or log command failed."""

    def __init__(
        self,
        message: str,
        command: str | None = None,
        stderr: str | None = None,
    ):
        super().__init__(
            message,
            details={"command": command, "stderr": stderr},
        )
        self.command = command
        self.stderr = stderr
