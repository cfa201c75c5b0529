"""
Core Data Models for goalpath.
Defines goals, reviews, obstacles, patterns, preferences and session entries.
"""
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class GoalType(str, Enum):
    HABIT = "habit"            # 周期性打卡
    MILESTONE = "milestone"    # 一次性里程碑
    MEASURABLE = "measurable"  # 数值型目标


class GoalFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class GoalStatus(str, Enum):
    LOCKED = "locked"        # 前置目标未全部达成
    AVAILABLE = "available"  # 已解锁，尚未开始
    ACTIVE = "active"        # 进行中
    PAUSED = "paused"        # 暂停
    ACHIEVED = "achieved"    # 已达成


class ReviewRating(str, Enum):
    STRUGGLING = "struggling"
    SLOW = "slow"
    ON_TRACK = "on-track"
    EXCEEDING = "exceeding"


SUCCESS_RATINGS = frozenset({ReviewRating.ON_TRACK, ReviewRating.EXCEEDING})


class PatternType(str, Enum):
    SUCCESS = "success"
    RISK = "risk"
    OPPORTUNITY = "opportunity"


def parse_date(value: Any) -> Optional[date]:
    """Accept a date, a datetime or an ISO string; None stays None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class Goal:
    """目标（支持层级结构与前置依赖图）"""
    id: str
    title: str
    why: str
    type: GoalType
    frequency: GoalFrequency
    target: float
    unit: str
    status: GoalStatus = GoalStatus.ACTIVE
    progress: float = 0
    maturity: int = 0
    description: Optional[str] = None
    identity: Optional[str] = None      # "I am someone who..."
    # 层级与依赖
    parent_id: Optional[str] = None
    children: List[str] = field(default_factory=list)
    prerequisites: List[str] = field(default_factory=list)
    unlocks: List[str] = field(default_factory=list)
    # 回顾节奏
    check_in_interval: int = 7
    next_check_in: Optional[date] = None
    last_review: Optional[date] = None
    owner: str = ""
    tags: List[str] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self):
        now = datetime.now().isoformat()
        if self.created_at is None:
            self.created_at = now
        if self.updated_at is None:
            self.updated_at = now

    def touch(self, now: datetime) -> None:
        self.updated_at = now.isoformat()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        data["frequency"] = self.frequency.value
        data["status"] = self.status.value
        data["next_check_in"] = _iso(self.next_check_in)
        data["last_review"] = _iso(self.last_review)
        return data

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Goal":
        return cls(
            id=d["id"],
            title=d["title"],
            why=d.get("why", ""),
            type=GoalType(d["type"]),
            frequency=GoalFrequency(d["frequency"]),
            target=d.get("target", 0),
            unit=d.get("unit", ""),
            status=GoalStatus(d.get("status", GoalStatus.ACTIVE.value)),
            progress=d.get("progress", 0),
            maturity=d.get("maturity", 0),
            description=d.get("description"),
            identity=d.get("identity"),
            parent_id=d.get("parent_id"),
            children=list(d.get("children") or []),
            prerequisites=list(d.get("prerequisites") or []),
            unlocks=list(d.get("unlocks") or []),
            check_in_interval=d.get("check_in_interval", 7),
            next_check_in=parse_date(d.get("next_check_in")),
            last_review=parse_date(d.get("last_review")),
            owner=d.get("owner", ""),
            tags=list(d.get("tags") or []),
            created_at=d.get("created_at"),
            updated_at=d.get("updated_at"),
        )


@dataclass
class Review:
    """一次回顾（不可变事件，可补记过去的日期）"""
    id: str
    goal_id: str
    date: date
    rating: ReviewRating
    evidence: str
    value: Optional[float] = None       # 仅 measurable 目标使用
    obstacles: List[str] = field(default_factory=list)
    wins: List[str] = field(default_factory=list)
    coaching: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.rating in SUCCESS_RATINGS

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        data["rating"] = self.rating.value
        return data

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Review":
        return cls(
            id=d["id"],
            goal_id=d["goal_id"],
            date=parse_date(d["date"]),
            rating=ReviewRating(d["rating"]),
            evidence=d.get("evidence", ""),
            value=d.get("value"),
            obstacles=list(d.get("obstacles") or []),
            wins=list(d.get("wins") or []),
            coaching=d.get("coaching"),
        )


@dataclass
class Obstacle:
    id: str
    goal_id: str
    description: str
    created_at: str
    resolved: bool = False
    resolved_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Obstacle":
        return cls(
            id=d["id"],
            goal_id=d["goal_id"],
            description=d.get("description", ""),
            created_at=d.get("created_at", ""),
            resolved=bool(d.get("resolved", False)),
            resolved_at=d.get("resolved_at"),
        )


@dataclass
class Pattern:
    """Advisory pattern detected over review history."""
    id: str
    type: PatternType
    description: str
    confidence: float
    applies_to: List[str]
    detected_at: str
    suggestion: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Pattern":
        return cls(
            id=d["id"],
            type=PatternType(d["type"]),
            description=d.get("description", ""),
            confidence=d.get("confidence", 0.0),
            applies_to=list(d.get("applies_to") or []),
            detected_at=d.get("detected_at", ""),
            suggestion=d.get("suggestion"),
        )


@dataclass
class UserPreferences:
    """用户偏好"""
    locale: str = "en"
    timezone: str = "UTC"
    reminder_time: Optional[str] = None
    name: Optional[str] = None
    morning_cron: Optional[str] = None    # None = 未启用提醒
    evening_cron: Optional[str] = None
    last_reminder_check: Optional[str] = None

    @property
    def reminders_enabled(self) -> bool:
        return bool(self.morning_cron or self.evening_cron)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "UserPreferences":
        known = {k: v for k, v in d.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass
class SessionEntry:
    """A single session (audit) log line."""
    ts: str
    action: str
    goal_id: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
