import os
import sys
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Keep tests away from the repository's logs/ and data/ directories.
_SCRATCH = Path(tempfile.mkdtemp(prefix="goalpath-tests-"))
os.environ.setdefault("GOALPATH_LOG_DIR", str(_SCRATCH / "logs"))
os.environ.setdefault("GOALPATH_DATA_DIR", str(_SCRATCH / "data"))

from goalpath.config_manager import SystemConfig  # noqa: E402
from goalpath.goal_service import GoalService  # noqa: E402
from goalpath.lifecycle import GoalDraft  # noqa: E402
from goalpath.models import GoalFrequency, GoalType  # noqa: E402
from goalpath.storage import UserStore  # noqa: E402

# Wednesday; its week starts on Monday 2026-03-09.
FIXED_NOW = datetime(2026, 3, 11, 10, 0, 0)


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FrozenClock(FIXED_NOW)


@pytest.fixture
def store(tmp_path):
    return UserStore("alice", tmp_path)


@pytest.fixture
def service(store, clock):
    return GoalService(store, config=SystemConfig(), clock=clock)


@pytest.fixture
def make_draft():
    def _make(title="Run", **overrides):
        fields = dict(
            title=title,
            type=GoalType.HABIT,
            frequency=GoalFrequency.WEEKLY,
            target=3,
            unit="runs",
            why="Feel strong",
        )
        fields.update(overrides)
        return GoalDraft(**fields)

    return _make
