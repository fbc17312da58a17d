# career/migrate.py
from __future__ import annotations

import logging
from typing import Any, Dict, List

from .config import DEFAULT_SEED, SECURITY_CRISIS, SECURITY_WARNING

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = 2

# schema history
#   0  browser-era blob: {team, leagueStandings, isUnemployed, hasPledged}
#   1  {club, standings, state}
#   2  + seed, offers, history, transfer_list


def _legacy_state(blob: Dict[str, Any]) -> str:
    """Two booleans and a security number folded into one CareerState value."""
    if blob.get("isUnemployed"):
        return "unemployed"
    if blob.get("hasPledged"):
        return "pledged"
    sec = int((blob.get("team") or {}).get("jobSecurity", 80))
    if sec < SECURITY_CRISIS:
        return "crisis_pending"
    return "warned" if sec < SECURITY_WARNING else "secure"


def _objective(o: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "oid": str(o.get("oid", o.get("id", ""))),
        "title": str(o.get("title", "")),
        "description": str(o.get("description", "")),
        "kind": str(o.get("kind", o.get("type", "WINS"))),
        "target": int(o.get("target", 0)),
        "reward": int(o.get("reward", 0)),
        "current": int(o.get("current", 0)),
        "completed": bool(o.get("completed", False)),
        "claimed": bool(o.get("claimed", o.get("completed", False))),
    }


def _v0_to_v1(blob: Dict[str, Any]) -> Dict[str, Any]:
    club = dict(blob.get("team") or {})
    club["objectives"] = [_objective(o) for o in club.get("objectives", [])]
    return {
        "schema_version": 1,
        "club": club,
        "standings": normalize_rows(list(blob.get("leagueStandings") or [])),
        "state": _legacy_state(blob),
    }


def _v1_to_v2(blob: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(blob)
    out["schema_version"] = 2
    out.setdefault("seed", DEFAULT_SEED)
    out.setdefault("offers", [])
    out.setdefault("history", [])
    out.setdefault("transfer_list", [])
    return out


_STEPS = {0: _v0_to_v1, 1: _v1_to_v2}


def detect_version(blob: Dict[str, Any]) -> int:
    if "schema_version" in blob:
        return int(blob["schema_version"])
    return 0 if "team" in blob else 1


def migrate_save(blob: Dict[str, Any]) -> Dict[str, Any]:
    """
    Walk a save blob forward one schema step at a time.
    Raises ValueError for blobs from a newer build or with no usable club.
    """
    if not isinstance(blob, dict):
        raise ValueError("save blob is not an object")
    version = detect_version(blob)
    if version > CURRENT_SCHEMA_VERSION:
        raise ValueError(f"save schema {version} is newer than this build ({CURRENT_SCHEMA_VERSION})")
    out: Dict[str, Any] = dict(blob)
    while version < CURRENT_SCHEMA_VERSION:
        logger.info("Migrating save from schema %d", version)
        out = _STEPS[version](out)
        version += 1
    if not isinstance(out.get("club"), dict):
        raise ValueError("save has no club")
    return out


def normalize_rows(rows: List[Any]) -> List[Dict[str, Any]]:
    """Keep only standings rows that at least carry a name."""
    return [r for r in rows if isinstance(r, dict) and r.get("name")]
