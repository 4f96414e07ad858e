"""Process environment snapshots for scripts.

Turns the host environment into ``KEY=VALUE`` entries for a script's env
list. A policy picks which variables go in:

- inherit_all: everything
- no_secrets: everything except names that look like credentials
- core_only: only the handful of vars shells and runtimes need to start
- inherit_none: nothing
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from enum import Enum


class EnvVarPolicy(str, Enum):
    """Which process environment variables a script inherits."""

    INHERIT_ALL = "inherit_all"
    NO_SECRETS = "no_secrets"
    CORE_ONLY = "core_only"
    INHERIT_NONE = "inherit_none"


# POSIX shells plus what cmd.exe/PowerShell need to locate executables
CORE_VARS: frozenset[str] = frozenset(
    {
        "PATH",
        "HOME",
        "USER",
        "SHELL",
        "LANG",
        "TERM",
        "TMPDIR",
        "SYSTEMROOT",
        "COMSPEC",
        "PATHEXT",
    }
)

# Compared against the upper-cased name
CREDENTIAL_MARKERS: tuple[str, ...] = (
    "_API_KEY",
    "_SECRET",
    "_TOKEN",
    "_PASSWORD",
    "_CREDENTIAL",
    "_AUTH",
)


def looks_like_credential(name: str) -> bool:
    return name.upper().endswith(CREDENTIAL_MARKERS)


def is_core_var(name: str) -> bool:
    # Windows env names are case-insensitive
    return name.upper() in CORE_VARS


_KEEP: dict[EnvVarPolicy, Callable[[str], bool]] = {
    EnvVarPolicy.INHERIT_ALL: lambda name: True,
    EnvVarPolicy.NO_SECRETS: lambda name: not looks_like_credential(name),
    EnvVarPolicy.CORE_ONLY: is_core_var,
    EnvVarPolicy.INHERIT_NONE: lambda name: False,
}


def format_entry(key: str, value: object) -> str:
    """Format a single ``KEY=VALUE`` entry."""
    return f"{key}={value}"


def environ_entries(
    policy: EnvVarPolicy | str = EnvVarPolicy.INHERIT_ALL,
    base_env: Mapping[str, str] | None = None,
) -> list[str]:
    """Snapshot an environment as ``KEY=VALUE`` entries.

    Args:
        policy: Which vars to keep from base_env.
        base_env: The environment to read, ``os.environ`` when omitted.
            It is only read, never modified.

    Returns:
        Entries in the order the mapping yields them.
    """
    keep = _KEEP[EnvVarPolicy(policy)]
    env = os.environ if base_env is None else base_env
    return [format_entry(k, v) for k, v in env.items() if keep(k)]
