"""审计报告与控制台摘要输出。"""

from __future__ import annotations

import csv
from datetime import datetime
from pathlib import Path

from .constants import (
    DECISION_ATTRIBUTE_SET,
    DECISION_MAPPED,
    DECISION_REMOVED,
    DECISION_SKIPPED,
)
from .models import AuditRecord, ProcessingCounts

REPORT_COLUMNS = [
    "element",
    "elementType",
    "document",
    "namespace",
    "property",
    "value",
    "action",
    "mappedProperty",
    "mappedValue",
    "reason",
]


def write_audit_report(
    records: list[AuditRecord], report_dir: Path, now: datetime | None = None
) -> tuple[Path, Path]:
    """写入明细报告与汇总报告，返回两个文件路径。"""

    now = now or datetime.now()
    stamp = now.strftime("%Y-%m-%dT%H-%M-%S")
    report_dir.mkdir(parents=True, exist_ok=True)

    detail_path = report_dir / f"remediation-report-{stamp}.csv"
    with detail_path.open("w", newline="", encoding="utf-8") as fp:
        writer = csv.DictWriter(fp, fieldnames=REPORT_COLUMNS)
        writer.writeheader()
        for record in records:
            writer.writerow(record.to_row())

    summary_path = report_dir / f"remediation-report-{stamp}-summary.csv"
    with summary_path.open("w", newline="", encoding="utf-8") as fp:
        writer = csv.writer(fp)
        writer.writerow(["Summary", ""])
        for label, value in summarize_records(records, now):
            writer.writerow([label, value])

    return detail_path, summary_path


def summarize_records(records: list[AuditRecord], now: datetime) -> list[tuple[str, str]]:
    def count(action: str) -> str:
        return str(sum(1 for record in records if record.action == action))

    return [
        ("Generated", now.isoformat(timespec="seconds")),
        ("Total Properties", str(len(records))),
        ("Mapped", count(DECISION_MAPPED)),
        ("Widget Properties Set", count(DECISION_ATTRIBUTE_SET)),
        ("Removed", count(DECISION_REMOVED)),
        ("Skipped", count(DECISION_SKIPPED)),
    ]


def format_run_summary(totals: ProcessingCounts) -> list[str]:
    lines = [
        "=" * 70,
        "  分析完成",
        "=" * 70,
        f"  处理控件数:        {totals.widgets}",
        f"  相关属性数:        {totals.props}",
        f"  ├─ 映射(设计属性):  {totals.mapped}",
        f"  ├─ 映射(控件属性):  {totals.attribute_set}",
        f"  ├─ 删除:            {totals.removed}",
        f"  └─ 跳过(无规则):    {totals.skipped}",
    ]
    if totals.skipped_native_layouts > 0:
        lines.append(f"  Native 布局页面:    {totals.skipped_native_layouts}（已跳过）")
    return lines


def format_commit_summary(totals: ProcessingCounts, branch: str) -> list[str]:
    return [
        "=" * 70,
        "  提交摘要",
        "=" * 70,
        f"  分支:        {branch}",
        f"  控件:        {totals.widgets}",
        "  属性:",
        f"    - 映射:     {totals.mapped} 个设计属性",
        f"    - 控件属性: {totals.attribute_set} 个",
        f"    - 删除:     {totals.removed} 个",
        f"    - 跳过:     {totals.skipped} 个（无规则）",
        f"  变更合计:    {totals.total_modified} 个属性",
        "=" * 70,
    ]


def build_commit_message(totals: ProcessingCounts) -> str:
    return (
        f"Remediated {totals.total_modified} Native design properties "
        f"({totals.mapped} design props mapped, {totals.attribute_set} widget props set, "
        f"{totals.removed} removed)"
    )
