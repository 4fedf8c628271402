"""设计属性迁移主流程。"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from .backend import open_working_copy, uncommitted_paths
from .catalog import describe_catalog, load_rule_catalog
from .cli import parse_args
from .config import load_settings
from .errors import BackendError, CommitError, ConfigError, LoadError, TraversalError
from .pipeline import analyze_model, commit_run
from .prompt import ask_confirmation
from .report import format_run_summary, write_audit_report
from .tree import JsonModelTree


def main(argv: list[str] | None = None) -> int:
    """脚本主流程：加载规则 -> 分析全部文档 -> 输出报告 -> 确认后提交。"""

    args = parse_args(argv)

    print("=" * 70)
    print("  NATIVE → WEB 设计属性迁移")
    print("=" * 70)

    # 配置与规则都要在打开工作副本、读取任何文档之前校验完毕。
    try:
        settings = load_settings(os.environ, args)
    except ConfigError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1

    rules_path = Path(args.rules)
    try:
        catalog = load_rule_catalog(rules_path)
    except LoadError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1

    for line in describe_catalog(catalog, rules_path):
        print(line)
    if catalog.warnings:
        if args.strict:
            print("[ERROR] strict 模式命中规则 warning，已终止：", file=sys.stderr)
            for item in catalog.warnings:
                print(f"  - {item}", file=sys.stderr)
            return 2
        print("[WARN] 规则文件中需要人工关注的条目：", file=sys.stderr)
        for item in catalog.warnings:
            print(f"  - {item}", file=sys.stderr)

    print(f"> 模型目录: {settings.model_root}")
    print(f"> 目标分支: {settings.branch}")
    print(f"> 模式: {'DRY-RUN（只分析）' if args.dry_run else 'ACTIVE（确认后修改）'}")
    print(f"> 目标控件: {', '.join(sorted(settings.target_types))}")

    working_copy = None
    if args.dry_run:
        if not settings.model_root.is_dir():
            print(f"[ERROR] 模型目录不存在: {settings.model_root}", file=sys.stderr)
            return 1
        tree = JsonModelTree(settings.model_root)
    else:
        print("> 正在创建工作副本...")
        try:
            working_copy = open_working_copy(settings.model_root, settings.branch)
            pending = uncommitted_paths(settings.model_root)
        except BackendError as exc:
            if working_copy is not None:
                working_copy.discard()
            print(f"[ERROR] 无法创建工作副本: {exc}", file=sys.stderr)
            return 1
        if pending:
            print(
                f"[WARN] 模型目录有 {len(pending)} 处未提交的改动，本次只处理分支上已提交的内容：",
                file=sys.stderr,
            )
            for item in pending:
                print(f"  - {item}", file=sys.stderr)
        tree = JsonModelTree(working_copy.model_path)

    try:
        try:
            run = analyze_model(tree, catalog, settings)
        except TraversalError as exc:
            print(f"[ERROR] 无法遍历模型: {exc}", file=sys.stderr)
            return 1

        if run.records:
            detail_path, summary_path = write_audit_report(run.records, Path(args.report_dir))
            print(f"\n> 审计报告: {detail_path}")
            print(f"> 汇总报告: {summary_path}")

        print("")
        for line in format_run_summary(run.totals):
            print(line)

        if working_copy is None:
            print("\n> dry-run 模式，未修改任何文档。")
            return 0

        confirm = (lambda question: True) if args.yes else ask_confirmation
        try:
            committed = commit_run(run, working_copy, confirm, settings.branch)
        except CommitError as exc:
            print(f"[ERROR] 提交失败，所有修改均未落地：\n{exc}", file=sys.stderr)
            return 1

        if committed and args.push:
            try:
                working_copy.push(settings.token)
            except CommitError as exc:
                print(f"[ERROR] 推送失败：\n{exc}", file=sys.stderr)
                return 1
            print(f"[OK] 已推送 {settings.branch}")
        return 0
    finally:
        if working_copy is not None:
            working_copy.discard()
