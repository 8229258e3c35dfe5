"""
Player statistics serialization for import/export.

Exports and imports ``PlayerStats`` to/from JSON-compatible dicts. Where the
JSON ends up (file, browser storage, database) is up to the caller.
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict

from .stats import League, PlayerStats, league_for_points

SCHEMA_VERSION = 1


def stats_to_dict(
    stats: PlayerStats,
    *,
    metadata: Dict[str, Any] | None = None,
) -> Dict[str, Any]:
    """
    Serialize PlayerStats to a JSON-compatible dict.

    Args:
        stats: The statistics to serialize.
        metadata: Optional extra metadata (e.g. player name).

    Returns:
        Dict with schema_version, exported_at, stats, and optional metadata.
    """
    result: Dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "exported_at": datetime.now(timezone.utc).isoformat(),
        "stats": {
            "total_games": stats.total_games,
            "wins": stats.wins,
            "sweep_count": stats.sweep_count,
            "total_points": stats.total_points,
            "league": stats.league.value,
        },
    }
    if metadata:
        result["metadata"] = metadata
    return result


def stats_from_dict(d: Dict[str, Any]) -> PlayerStats:
    """
    Deserialize PlayerStats from a dict produced by ``stats_to_dict``.

    Missing fields default to zero; an unknown league falls back to the one
    implied by total points.
    """
    version = d.get("schema_version", SCHEMA_VERSION)
    if version > SCHEMA_VERSION:
        raise ValueError(f"Unsupported stats schema version {version}")
    s = d.get("stats", {})
    total_points = int(s.get("total_points", 0))
    try:
        league = League(s.get("league", ""))
    except ValueError:
        league = league_for_points(total_points)
    return PlayerStats(
        total_games=int(s.get("total_games", 0)),
        wins=int(s.get("wins", 0)),
        sweep_count=int(s.get("sweep_count", 0)),
        total_points=total_points,
        league=league,
    )


def stats_to_json(
    stats: PlayerStats,
    *,
    metadata: Dict[str, Any] | None = None,
) -> str:
    """Serialize PlayerStats to a JSON string."""
    return json.dumps(stats_to_dict(stats, metadata=metadata), indent=2)


def stats_from_json(s: str) -> PlayerStats:
    """Deserialize PlayerStats from a JSON string."""
    return stats_from_dict(json.loads(s))


__all__ = [
    "stats_to_dict",
    "stats_from_dict",
    "stats_to_json",
    "stats_from_json",
    "SCHEMA_VERSION",
]
