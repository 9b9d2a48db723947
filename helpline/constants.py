"""
helpline.constants — Shared Constants & Helpers
================================================

Single source of truth for dashboard presentation constants.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------
AGGREGATE_KEY = "aggregate"

LEADERBOARD_SIZE = 9

UNKNOWN_USER = "unknown user"

DEFAULT_RANGE_DAYS = 30

RANK_BADGES: list[str] = ["\U0001f947", "\U0001f948", "\U0001f949"]  # 🥇🥈🥉


# ---------------------------------------------------------------------------
# Discord CDN
# ---------------------------------------------------------------------------
def avatar_url(user_id: int, avatar_hash: str | None = None) -> str:
    """Construct a Discord CDN avatar URL."""
    if avatar_hash:
        ext = "gif" if avatar_hash.startswith("a_") else "png"
        return f"https://cdn.discordapp.com/avatars/{user_id}/{avatar_hash}.{ext}"
    # Default avatar (index based on user id)
    return f"https://cdn.discordapp.com/embed/avatars/{(user_id >> 22) % 6}.png"
