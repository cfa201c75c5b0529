"""
Configuration Manager for goalpath.

集中管理系统常量和配置参数。
所有经验值必须显式声明并可配置。

使用方式:
    from goalpath.config_manager import config
    interval = config.DEFAULT_CHECK_IN_INTERVAL
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

import yaml

from goalpath.exceptions import ConfigError
from goalpath.logger import get_logger


CONFIG_DIR = Path(__file__).parent.parent / "config"
RUNTIME_CONFIG_PATH = CONFIG_DIR / "runtime.yaml"

logger = get_logger("config")


@dataclass
class SystemConfig:
    """
    系统运行时常量配置。

    所有值均为经验值，可根据用户实际情况调整。
    """

    # === 目标与回顾 ===

    # 新目标的默认回顾间隔（天）
    # 经验值依据：一周是习惯养成最常见的反思周期
    DEFAULT_CHECK_IN_INTERVAL: int = 7

    # 历史记录默认条数
    HISTORY_LIMIT: int = 10

    # === 用户与本地化 ===

    DEFAULT_LOCALE: str = "en"
    DEFAULT_TIMEZONE: str = "UTC"

    # 未提供用户标识时使用的用户
    DEFAULT_USER_ID: str = "default"

    # === 提醒 ===

    # 早间回顾 / 晚间打卡的 cron 表达式
    MORNING_REMINDER_CRON: str = "0 9 * * *"
    EVENING_REMINDER_CRON: str = "0 20 * * *"

    # 通知渠道，例如 [{"type": "desktop"}, {"type": "webhook", "webhook_url": "..."}]
    NOTIFIERS: List[Dict[str, Any]] = None

    # === 洞察分析 ===

    # 关闭后 coaching 不可用
    ENABLE_AI: bool = True

    # 模式分析最少回顾数
    # 经验值依据：少于 10 条回顾无法识别有意义的模式
    PATTERN_MIN_REVIEWS: int = 10

    # 风险评估参考的最近回顾条数
    RISK_RECENT_REVIEWS: int = 5

    # 目标调整建议的回看窗口（周）
    TARGET_LOOKBACK_WEEKS: int = 4

    def __post_init__(self):
        if self.NOTIFIERS is None:
            self.NOTIFIERS = [{"type": "desktop"}]


def _load_runtime_config() -> dict:
    """加载运行时配置覆盖（如果存在）。"""
    if not RUNTIME_CONFIG_PATH.exists():
        return {}

    try:
        with open(RUNTIME_CONFIG_PATH, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (yaml.YAMLError, OSError) as e:
        raise ConfigError(f"Cannot read runtime config: {e}", str(RUNTIME_CONFIG_PATH)) from e

    if not isinstance(data, dict):
        raise ConfigError("Runtime config must be a mapping", str(RUNTIME_CONFIG_PATH))
    return data


def get_config() -> SystemConfig:
    """
    获取系统配置实例。

    优先级：runtime.yaml > 默认值
    """
    base = SystemConfig()
    overrides = _load_runtime_config()

    for key, value in overrides.items():
        if hasattr(base, key):
            setattr(base, key, value)
        else:
            logger.warning("Unknown config key ignored: %s", key)

    return base


# 全局配置实例（单例模式）
config = get_config()
