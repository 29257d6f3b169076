"""Runtime configuration normalization helpers.

These helpers keep CLI flag interpretation deterministic across entrypoints.
"""

from __future__ import annotations

RENDER_POLICIES = ("supersede", "race")


def resolve_log_level(*, verbose: bool, quiet: bool) -> str:
    """Resolve effective log level from CLI flags.

    Precedence is deterministic: --quiet overrides --verbose.
    """
    if quiet:
        return "WARNING"
    if verbose:
        return "DEBUG"
    return "INFO"


def normalize_render_policy(value: str) -> str:
    """Normalize CLI render policy value to a supported policy name."""
    normalized = value.strip().lower()
    if normalized in RENDER_POLICIES:
        return normalized
    return "supersede"


def supersedes_stale_renders(policy: str) -> bool:
    """Return whether a newer Show should cancel an in-flight render."""
    return normalize_render_policy(policy) == "supersede"
