"""命令行确认提示。"""

from __future__ import annotations

from typing import Callable


def ask_confirmation(question: str, input_func: Callable[[str], str] = input) -> bool:
    """阻塞等待用户输入，仅 yes/y（不区分大小写）视为确认。

    标准输入被关闭时按“取消”处理，不会有任何修改落地。
    """

    try:
        answer = input_func(f"{question} (yes/no): ")
    except EOFError:
        return False
    normalized = answer.strip().lower()
    return normalized in ("yes", "y")
