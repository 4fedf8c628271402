"""遍历全部文档、汇总分析结果，并在确认后执行修改与提交。

整个流程分两段：分析阶段只读模型并收集待执行修改与审计记录；
只有用户确认后才会执行修改并交给工作副本一次性提交。
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Callable

from .catalog import RuleCatalog
from .config import Settings
from .errors import RemediationError, TraversalError
from .models import AuditRecord, Document, Element, ElementResult, Mutation, ProcessingCounts
from .mutations import apply_mutations
from .process import process_element, process_page_properties
from .report import build_commit_message, format_commit_summary

Emit = Callable[[str], None]


def print_warning(message: str) -> None:
    # warning 输出到 stderr，便于与正常日志分流采集。
    print(f"[WARN] {message}", file=sys.stderr)


@dataclass
class RemediationRun:
    totals: ProcessingCounts = field(default_factory=ProcessingCounts)
    records: list[AuditRecord] = field(default_factory=list)
    mutations: list[Mutation] = field(default_factory=list)
    documents: list[Document] = field(default_factory=list)

    def merge(self, result: ElementResult) -> None:
        self.totals.add(result.counts)
        self.records.extend(result.records)
        self.mutations.extend(result.mutations)


def is_native_layout_page(document: Document) -> bool:
    return document.kind == "Page" and bool(document.layout) and "native" in document.layout.lower()


def emit_result(emit: Emit, header: str, result: ElementResult) -> None:
    emit("")
    emit(header)
    for note in result.notes:
        emit(f"       {note}")
    if result.counts.skipped:
        emit(f"       ○ 跳过: {result.counts.skipped} 个属性（无规则）")


def analyze_document(
    document: Document,
    tree,
    catalog: RuleCatalog,
    settings: Settings,
    emit: Emit = print,
    warn: Emit = print_warning,
) -> RemediationRun:
    """分析单个文档。遍历失败时抛出 TraversalError，由调用方丢弃该文档。"""

    doc_run = RemediationRun()
    namespace = document.namespace
    doc_name = document.qualified_name

    if document.kind == "Page" and document.design_properties:
        page_result = process_page_properties(document, namespace)
        doc_run.merge(page_result)
        emit_result(emit, f"  [Page] {doc_name}\n    └─ Page: {doc_name}", page_result)

    def visit(element: Element) -> None:
        try:
            result = process_element(
                element, catalog, settings.target_types, doc_name, namespace
            )
        except (RemediationError, TypeError, ValueError) as exc:
            warn(f"处理 {doc_name} 中的控件 `{element.name}` 失败: {exc}")
            return
        for item in result.warnings:
            warn(f"{doc_name}: {item}")
        if result.counts.props == 0:
            return
        doc_run.merge(result)
        emit_result(
            emit,
            f"  [{document.kind}] {doc_name}\n    └─ {element.type}: {element.name or 'Unnamed'}",
            result,
        )

    tree.traverse(document, visit)
    if doc_run.mutations:
        doc_run.documents.append(document)
    return doc_run


def analyze_model(
    tree,
    catalog: RuleCatalog,
    settings: Settings,
    emit: Emit = print,
    warn: Emit = print_warning,
) -> RemediationRun:
    """分析阶段：只读遍历全部命名空间与文档，不修改任何模型。"""

    run = RemediationRun()
    for namespace in tree.list_namespaces():
        if namespace in settings.excluded_namespaces:
            continue
        emit("")
        emit("─" * 50)
        emit(f"处理命名空间: [{namespace}]")
        emit("─" * 50)

        for handle in tree.list_documents(namespace):
            try:
                document = handle.load()
            except TraversalError as exc:
                warn(str(exc))
                continue

            if is_native_layout_page(document):
                run.totals.skipped_native_layouts += 1
                emit(f"  [SKIP] {document.qualified_name} - Native 布局")
                continue

            try:
                doc_run = analyze_document(document, tree, catalog, settings, emit, warn)
            except TraversalError as exc:
                warn(f"遍历 {document.qualified_name} 失败: {exc}")
                continue

            run.totals.add(doc_run.totals)
            run.records.extend(doc_run.records)
            run.mutations.extend(doc_run.mutations)
            run.documents.extend(doc_run.documents)
    return run


def commit_run(
    run: RemediationRun,
    working_copy,
    confirm: Callable[[str], bool],
    branch: str,
    emit: Emit = print,
    warn: Emit = print_warning,
) -> bool:
    """确认后执行全部修改并一次性提交；返回是否已提交。

    用户拒绝时丢弃全部待执行修改，工作副本不会收到任何内容。
    CommitError 不在这里捕获，由调用方按致命错误处理。
    """

    if run.totals.total_modified == 0 or not run.mutations:
        emit("> 没有需要修改的属性。")
        return False

    emit("")
    for line in format_commit_summary(run.totals, branch):
        emit(line)

    if not confirm(f'\n是否将以上修改提交到分支 "{branch}"?'):
        emit("> 已取消提交，修改未保存，工作副本将被丢弃。")
        return False

    emit("> 正在执行修改...")
    applied, failures = apply_mutations(run.mutations)
    for item in failures:
        warn(f"修改未能执行: {item}")
    emit(f"> 已执行 {applied}/{len(run.mutations)} 条修改。")

    emit("> 正在提交...")
    revision = working_copy.commit(run.documents, build_commit_message(run.totals))
    emit(f"[OK] 已提交到 {branch}: {revision}")
    return True
