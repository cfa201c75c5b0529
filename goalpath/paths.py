"""
Centralized filesystem paths for runtime data.

Layout under the data directory:
    users/<user_id>/goals.json
    users/<user_id>/reviews.json
    users/<user_id>/preferences.json
    users/<user_id>/insights/patterns.json
    users/<user_id>/obstacles/obstacles.json
    users/<user_id>/sessions/<YYYY-MM-DD>.jsonl
"""
import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent


def get_data_dir() -> Path:
    """
    Return runtime data directory.

    Priority:
    1. GOALPATH_DATA_DIR env var
    2. <project_root>/data
    """
    raw = os.getenv("GOALPATH_DATA_DIR", "").strip()
    if raw:
        return Path(raw).expanduser()
    return PROJECT_ROOT / "data"


def user_data_dir(base_dir: Path, user_id: str) -> Path:
    return Path(base_dir).expanduser() / "users" / user_id


def goals_path(base_dir: Path, user_id: str) -> Path:
    return user_data_dir(base_dir, user_id) / "goals.json"


def reviews_path(base_dir: Path, user_id: str) -> Path:
    return user_data_dir(base_dir, user_id) / "reviews.json"


def preferences_path(base_dir: Path, user_id: str) -> Path:
    return user_data_dir(base_dir, user_id) / "preferences.json"


def patterns_path(base_dir: Path, user_id: str) -> Path:
    return user_data_dir(base_dir, user_id) / "insights" / "patterns.json"


def obstacles_path(base_dir: Path, user_id: str) -> Path:
    return user_data_dir(base_dir, user_id) / "obstacles" / "obstacles.json"


def session_log_path(base_dir: Path, user_id: str, day: str) -> Path:
    return user_data_dir(base_dir, user_id) / "sessions" / f"{day}.jsonl"


DATA_DIR = get_data_dir()
