"""命令行参数解析。"""

from __future__ import annotations

import argparse

from .constants import DEFAULT_REPORT_DIR, DEFAULT_RULES_FILE


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """解析命令行参数。

    模型目录、分支与控件类型白名单默认取自环境变量，这里的同名参数用于临时覆盖。
    """

    parser = argparse.ArgumentParser(description="迁移并清理 Native 设计属性")
    parser.add_argument(
        "--rules",
        default=DEFAULT_RULES_FILE,
        help=f"属性映射规则文件（默认：{DEFAULT_RULES_FILE}）",
    )
    parser.add_argument(
        "--model-root",
        default="",
        help="模型目录；为空时读取 PROPFIX_MODEL_ROOT",
    )
    parser.add_argument(
        "--branch",
        default="",
        help="提交目标分支；为空时读取 PROPFIX_BRANCH",
    )
    parser.add_argument(
        "--target-types",
        default="",
        help="逗号分隔的控件类型白名单；为空时读取 PROPFIX_TARGET_TYPES 或使用内置列表",
    )
    parser.add_argument(
        "--report-dir",
        default=DEFAULT_REPORT_DIR,
        help=f"审计报告输出目录（默认：{DEFAULT_REPORT_DIR}）",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="只分析并输出报告，不询问、不提交",
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="跳过交互确认，直接提交",
    )
    parser.add_argument(
        "--push",
        action="store_true",
        help="提交后推送到 origin（需要 PROPFIX_TOKEN）",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="严格模式：规则文件出现任何 warning 即返回非 0",
    )
    return parser.parse_args(argv)
