"""迁移流程中使用的异常类型。"""

from __future__ import annotations


class RemediationError(Exception):
    """所有迁移异常的基类。"""


class ConfigError(RemediationError):
    """运行配置缺失或非法，在访问任何模型之前抛出。"""


class LoadError(RemediationError):
    """规则文件不存在或结构非法；对整次运行是致命错误。"""


class UnsupportedRedirect(RemediationError):
    """控件不支持目标属性，或目标值无法映射为已知枚举值。"""


class MutationApplyError(RemediationError):
    """单条待执行修改无法落地；仅告警，不中断其余修改。"""


class TraversalError(RemediationError):
    """单个文档加载或遍历失败；跳过该文档继续处理。"""


class BackendError(RemediationError):
    """工作副本无法打开或操作。"""


class CommitError(BackendError):
    """最终提交失败；整批修改都不会落地。"""
