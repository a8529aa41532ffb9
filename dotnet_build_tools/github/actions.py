"""GitHub Actions environment metadata and workflow commands.

Every helper takes an optional environment mapping so callers can pass a
snapshot instead of reading the process environment.
"""

import os
import sys
import uuid
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import TextIO


def _env(env: Mapping[str, str] | None) -> Mapping[str, str]:
    return os.environ if env is None else env


def _read(name: str, env: Mapping[str, str] | None) -> str | None:
    value = _env(env).get(name)
    return value if value else None


def is_github_actions(env: Mapping[str, str] | None = None) -> bool:
    """Check whether the process runs inside a GitHub Actions job."""
    return _env(env).get("GITHUB_ACTIONS", "").lower() == "true"


def repository(env: Mapping[str, str] | None = None) -> str | None:
    """``owner/name`` of the repository being built."""
    return _read("GITHUB_REPOSITORY", env)


def ref(env: Mapping[str, str] | None = None) -> str | None:
    return _read("GITHUB_REF", env)


def sha(env: Mapping[str, str] | None = None) -> str | None:
    return _read("GITHUB_SHA", env)


def actor(env: Mapping[str, str] | None = None) -> str | None:
    return _read("GITHUB_ACTOR", env)


def workspace(env: Mapping[str, str] | None = None) -> str | None:
    return _read("GITHUB_WORKSPACE", env)


def run_number(env: Mapping[str, str] | None = None) -> str | None:
    return _read("GITHUB_RUN_NUMBER", env)


def run_id(env: Mapping[str, str] | None = None) -> str | None:
    return _read("GITHUB_RUN_ID", env)


def _append(path: str | None, text: str) -> bool:
    if not path:
        return False
    with open(path, "a", encoding="utf-8") as f:
        f.write(text)
    return True


def set_output(name: str, value: str, env: Mapping[str, str] | None = None) -> bool:
    """
    Set a step output through the GITHUB_OUTPUT file.

    Multi-line values are written with a random heredoc delimiter.

    Returns:
        False when not running with an output file
    """
    if "\n" in value:
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        entry = f"{name}<<{delimiter}\n{value}\n{delimiter}\n"
    else:
        entry = f"{name}={value}\n"
    return _append(_read("GITHUB_OUTPUT", env), entry)


def append_summary(markdown: str, env: Mapping[str, str] | None = None) -> bool:
    """Append markdown to the job summary; False when there is no summary file."""
    return _append(_read("GITHUB_STEP_SUMMARY", env), markdown + "\n")


def escape_data(message: str) -> str:
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _command(name: str, message: str, stream: TextIO | None) -> None:
    print(f"::{name}::{escape_data(message)}", file=stream or sys.stdout, flush=True)


def error(message: str, stream: TextIO | None = None) -> None:
    _command("error", message, stream)


def warning(message: str, stream: TextIO | None = None) -> None:
    _command("warning", message, stream)


def debug(message: str, stream: TextIO | None = None) -> None:
    _command("debug", message, stream)


@contextmanager
def log_group(title: str, stream: TextIO | None = None) -> Iterator[None]:
    """Fold everything logged inside the block under a collapsible group."""
    _command("group", title, stream)
    try:
        yield
    finally:
        print("::endgroup::", file=stream or sys.stdout, flush=True)
