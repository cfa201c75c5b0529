"""
goalpath 异常定义模块。

定义系统中所有自定义异常的层次结构：
- GoalPathError: 基类，所有已知错误
- NotFoundError: 目标 / 障碍等引用的 id 不存在
- AlreadyExistsError: 创建目标时派生 id 冲突
- ValidationError: 输入格式非法（负数目标、未知字段、非法 cron 等）
- ConfigError: 配置文件错误
- StateError: 存储数据损坏或关系完整性被破坏

每个异常都带有 i18n key 与参数，界面层据此输出本地化消息。
"""
from typing import Any, Dict, Optional


class GoalPathError(Exception):
    """goalpath 基础异常类。

    所有系统内已知错误都继承自此类。
    捕获此类可以处理所有预期的错误情况。
    """

    key = "errors.generic"

    def __init__(
        self,
        message: str,
        hint: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            message: 错误描述
            hint: 对用户的操作建议
            params: 本地化消息的模板参数
        """
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.params = dict(params or {})
        self.params.setdefault("message", message)

    def get_user_message(self, locale: Optional[str] = None) -> str:
        """返回用户友好的错误消息；给出 locale 时使用对应语言模板。"""
        text = self.message
        if locale:
            from goalpath.i18n import translate

            translated = translate(locale, self.key, self.params)
            if translated != self.key:
                text = translated
        if self.hint:
            return f"{text}\n💡 {self.hint}"
        return text


class NotFoundError(GoalPathError):
    """引用的目标不存在。"""

    key = "goals.notFound"

    def __init__(self, goal_id: str, kind: str = "goal"):
        super().__init__(f"{kind.capitalize()} not found: {goal_id}", params={"id": goal_id})
        self.goal_id = goal_id
        self.kind = kind
        if kind != "goal":
            self.key = f"{kind}s.notFound"


class AlreadyExistsError(GoalPathError):
    """派生的目标 id 已被占用。"""

    key = "goals.alreadyExists"

    def __init__(self, goal_id: str):
        super().__init__(
            f"A goal with id '{goal_id}' already exists",
            hint="Use a different title or a parent goal",
            params={"id": goal_id},
        )
        self.goal_id = goal_id


class ValidationError(GoalPathError):
    """输入格式非法。"""

    key = "errors.validation"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, params={"field": field or ""})
        self.field = field


class ConfigError(GoalPathError):
    """配置文件错误。

    当配置文件缺失、格式错误或内容非法时抛出。
    """

    key = "errors.config"

    def __init__(self, message: str, config_path: Optional[str] = None):
        hint = f"Check the config file: {config_path}" if config_path else "Check the config file format"
        super().__init__(message, hint)
        self.config_path = config_path


class StateError(GoalPathError):
    """状态相关错误。

    当存储文档无法解析，或结构性修改后关系完整性被破坏时抛出。
    """

    key = "errors.state"

    def __init__(self, message: str, corrupted_data: Optional[str] = None):
        hint = "Stored data may be damaged, see logs/corruption_dump.log"
        super().__init__(message, hint)
        self.corrupted_data = corrupted_data
