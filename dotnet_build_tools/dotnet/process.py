"""External command execution."""

import shlex
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

from dotnet_build_tools.core.exceptions import ProcessError
from dotnet_build_tools.utils.logging import get_logger

logger = get_logger(__name__)

# Lines of output kept in the log when a command fails
FAILURE_TAIL_LINES = 40


class ProcessRunner:
    """
    Runs external tools (dotnet, pwsh, bash, vs) and asserts a zero exit code.

    Output is captured and forwarded to the log line by line.
    """

    def __init__(
        self,
        cwd: Path | None = None,
        timeout: int | None = None,
        env: Mapping[str, str] | None = None,
    ):
        """
        Initialize runner.

        Args:
            cwd: Working directory for commands (defaults to the current one)
            timeout: Seconds before a command is killed (None waits forever)
            env: Full environment for child processes (defaults to inherited)
        """
        self.cwd = cwd
        self.timeout = timeout
        self.env = dict(env) if env is not None else None

    def run(self, command: Sequence[str], description: str | None = None) -> int:
        """
        Run a command to completion.

        Args:
            command: Program and arguments
            description: Optional human-readable summary for the log

        Returns:
            The exit code, which is always 0

        Raises:
            ProcessError: If the command cannot start, times out, or fails
        """
        display = shlex.join(command)
        if description:
            logger.info(f"[PROC] {description}")
        logger.info(f"[PROC] Command: {display}")

        try:
            result = subprocess.run(
                list(command),
                cwd=self.cwd,
                env=self.env,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise ProcessError(
                f"Executable not found: {command[0]}",
                command=display,
            ) from e
        except subprocess.TimeoutExpired as e:
            raise ProcessError(
                f"Command timed out after {self.timeout}s",
                command=display,
            ) from e

        output = (result.stdout or "") + (result.stderr or "")
        lines = [line for line in output.splitlines() if line.strip()]

        if result.returncode != 0:
            for line in lines[-FAILURE_TAIL_LINES:]:
                logger.error(f"[PROC] {line}")
            raise ProcessError(
                f"Command exited with code {result.returncode}",
                command=display,
                exit_code=result.returncode,
            )

        for line in lines:
            logger.debug(f"[PROC] {line}")
        return result.returncode
