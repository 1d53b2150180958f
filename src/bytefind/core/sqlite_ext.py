"""Register the search entry points as SQLite scalar functions."""

from __future__ import annotations

import logging
import sqlite3

from bytefind.core.functions import entry_point
from bytefind.core.profile import DEFAULT_PROFILE, Profile

log = logging.getLogger(__name__)

# Exact arities first; -1 catches every other call shape so it reaches the
# adapter and fails as a malformed call instead of an unknown function.
ARITIES = (2, 3, -1)


def register(connection: sqlite3.Connection, profile: Profile | None = None) -> list[str]:
    """Register every function of `profile` on `connection`.

    App-defined functions take precedence over SQLite's built-in `instr`, so the
    default profile replaces it with the three-argument form.

    Returns the registered function names.
    """
    profile = profile or DEFAULT_PROFILE
    names: list[str] = []
    for spec in profile.functions:
        func = entry_point(spec.direction, spec.encoding)
        for narg in ARITIES:
            connection.create_function(
                spec.name, narg, func, deterministic=profile.deterministic
            )
        log.debug(
            "registered %s (%s, %s, deterministic=%s)",
            spec.name,
            spec.direction,
            spec.encoding.value,
            profile.deterministic,
        )
        names.append(spec.name)
    return names


def connect(database: str = ":memory:", profile: Profile | None = None) -> sqlite3.Connection:
    """Open a connection with the search functions registered."""
    conn = sqlite3.connect(database)
    try:
        register(conn, profile)
    except Exception:
        conn.close()
        raise
    return conn
