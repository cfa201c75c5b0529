"""
UserStore: per-user JSON persistence for goals, reviews, preferences,
patterns and obstacles, plus the append-only session log (JSONL).

Every document is read and written as a whole; there is no partial or
row-level persistence. Missing files read as empty documents, unparseable
files raise StateError.
"""
import json
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from goalpath import paths
from goalpath.exceptions import StateError, ValidationError
from goalpath.logger import get_logger, log_corruption
from goalpath.models import Goal, Obstacle, Pattern, Review, SessionEntry, UserPreferences

logger = get_logger("storage")

USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.@-]{0,63}$")


def _read_json(path: Path) -> Optional[Dict[str, Any]]:
    if not path.exists():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        log_corruption(path, str(e))
        raise StateError(f"Cannot parse {path.name}: {e}", corrupted_data=str(path)) from e
    if not isinstance(data, dict):
        log_corruption(path, "top-level value is not an object")
        raise StateError(f"Unexpected document shape in {path.name}", corrupted_data=str(path))
    return data


def _write_json(path: Path, payload: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)


class UserStore:
    """Storage collaborator for a single user id."""

    def __init__(self, user_id: str, base_dir: Optional[Path] = None):
        if not USER_ID_PATTERN.match(user_id or ""):
            raise ValidationError(f"Invalid user id: {user_id!r}", field="user_id")
        self.user_id = user_id
        self.base_dir = Path(base_dir) if base_dir is not None else paths.DATA_DIR

    # ------------------------------------------------------------------
    # Goals / reviews
    # ------------------------------------------------------------------
    def load_goals(self) -> List[Goal]:
        data = _read_json(paths.goals_path(self.base_dir, self.user_id)) or {}
        return [Goal.from_dict(d) for d in data.get("goals", [])]

    def save_goals(self, goals: List[Goal]) -> None:
        _write_json(
            paths.goals_path(self.base_dir, self.user_id),
            {
                "goals": [g.to_dict() for g in goals],
                "last_updated": datetime.now().isoformat(),
            },
        )

    def load_reviews(self) -> List[Review]:
        data = _read_json(paths.reviews_path(self.base_dir, self.user_id)) or {}
        return [Review.from_dict(d) for d in data.get("reviews", [])]

    def save_reviews(self, reviews: List[Review]) -> None:
        _write_json(
            paths.reviews_path(self.base_dir, self.user_id),
            {
                "reviews": [r.to_dict() for r in reviews],
                "last_updated": datetime.now().isoformat(),
            },
        )

    # ------------------------------------------------------------------
    # Preferences / patterns / obstacles
    # ------------------------------------------------------------------
    def load_preferences(self, default_locale: str = "en", default_timezone: str = "UTC") -> UserPreferences:
        data = _read_json(paths.preferences_path(self.base_dir, self.user_id))
        if data is None:
            return UserPreferences(locale=default_locale, timezone=default_timezone)
        return UserPreferences.from_dict(data)

    def save_preferences(self, prefs: UserPreferences) -> None:
        _write_json(paths.preferences_path(self.base_dir, self.user_id), prefs.to_dict())

    def load_patterns(self) -> List[Pattern]:
        data = _read_json(paths.patterns_path(self.base_dir, self.user_id)) or {}
        return [Pattern.from_dict(d) for d in data.get("patterns", [])]

    def save_patterns(self, patterns: List[Pattern]) -> None:
        _write_json(
            paths.patterns_path(self.base_dir, self.user_id),
            {
                "patterns": [p.to_dict() for p in patterns],
                "last_analyzed": datetime.now().isoformat(),
            },
        )

    def load_obstacles(self) -> List[Obstacle]:
        data = _read_json(paths.obstacles_path(self.base_dir, self.user_id)) or {}
        return [Obstacle.from_dict(d) for d in data.get("obstacles", [])]

    def save_obstacles(self, obstacles: List[Obstacle]) -> None:
        _write_json(
            paths.obstacles_path(self.base_dir, self.user_id),
            {
                "obstacles": [o.to_dict() for o in obstacles],
                "last_updated": datetime.now().isoformat(),
            },
        )

    # ------------------------------------------------------------------
    # Session log
    # ------------------------------------------------------------------
    def append_audit_entry(self, entry: SessionEntry) -> None:
        """Append one line to sessions/<day>.jsonl; never read back by the core."""
        day = entry.ts.split("T")[0]
        path = paths.session_log_path(self.base_dir, self.user_id, day)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry.to_dict(), ensure_ascii=False, default=str) + "\n")

    def read_session_log(self, day: str) -> List[Dict[str, Any]]:
        path = paths.session_log_path(self.base_dir, self.user_id, day)
        if not path.exists():
            return []

        entries = []
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(json.loads(line))
                except json.JSONDecodeError:
                    logger.warning("Skipping unreadable session log line in %s", path)
                    continue
        return entries


def list_user_ids(base_dir: Optional[Path] = None) -> List[str]:
    """User ids that have a data directory, sorted."""
    users_dir = Path(base_dir if base_dir is not None else paths.DATA_DIR) / "users"
    if not users_dir.exists():
        return []
    return sorted(p.name for p in users_dir.iterdir() if p.is_dir())
