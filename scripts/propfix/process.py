"""单个控件的属性决策：查找规则、合并间距、处理目标冲突。"""

from __future__ import annotations

from typing import Iterable

from .catalog import RuleCatalog
from .constants import (
    ACTION_MAP,
    ACTION_REDIRECT,
    ACTION_REMOVE,
    COMPOUND_MARKER,
    DECISION_ATTRIBUTE_SET,
    DECISION_MAPPED,
    DECISION_REMOVED,
    DECISION_SKIPPED,
    REASON_COLLISION,
    REASON_NO_MAPPING,
    REASON_NO_WEB_EQUIVALENT,
    REASON_PAGE_UNSUPPORTED,
    REASON_WIDGET_PROPERTY,
    SPACING_PROPERTY,
    WIDGET_ATTRIBUTES,
)
from .errors import UnsupportedRedirect
from .models import (
    AuditContext,
    CompoundValue,
    DeleteProperty,
    DesignProperty,
    Document,
    Element,
    ElementResult,
    OptionValue,
    ReplaceSpacing,
    Rule,
    RewriteProperty,
    ScalarValue,
    SetAttribute,
    SpacingContribution,
    ToggleValue,
)
from .spacing import aggregate_spacing


def normalize_type_name(raw_type: str, widget_id: str = "") -> str:
    """把 `Pages$ActionButton` 这类结构类型名转换为查找用的简单名称。

    没有结构类型时回落到可插拔控件的 widgetId。
    """

    if raw_type:
        parts = raw_type.split("$")
        if len(parts) > 1:
            return parts[1]
        return raw_type
    return widget_id


def extract_property_value(prop: DesignProperty) -> str:
    """把属性值归一化为查找用字符串。

    复合值只返回占位标记，此阶段不展开内部结构。
    """

    value = prop.value
    if value is None:
        return ""
    if isinstance(value, OptionValue):
        return value.option or ""
    if isinstance(value, CompoundValue):
        return COMPOUND_MARKER
    if isinstance(value, ToggleValue):
        return "true"
    if isinstance(value, ScalarValue):
        if isinstance(value.value, bool):
            return "true" if value.value else "false"
        return str(value.value)
    raise TypeError(f"未知的属性值类型: {type(value).__name__}")


def check_redirect(element: Element, rule: Rule) -> None:
    """确认控件支持目标属性且目标值属于已知枚举。"""

    allowed = WIDGET_ATTRIBUTES.get(rule.widget_property)
    if allowed is None or element.type not in allowed["element_types"]:
        raise UnsupportedRedirect(
            f"{element.type} 不支持控件属性 `{rule.widget_property}`"
        )
    if rule.widget_value not in allowed["values"]:
        raise UnsupportedRedirect(
            f"`{rule.widget_property}` 不支持取值 `{rule.widget_value}`"
        )


def untouched_keys(element: Element, catalog: RuleCatalog) -> set[str]:
    """返回不会被任何规则改写或删除的属性键。

    这些属性会原样留在控件上，因此预先占用同名的映射目标。
    """

    keys: set[str] = set()
    for prop in element.design_properties:
        if not prop.key:
            continue
        rule = None
        if prop.key in catalog.property_names:
            prop_value = extract_property_value(prop)
            if prop_value:
                rule = catalog.resolve(prop.key, prop_value, element.type)
        if rule is not None and rule.action == ACTION_REDIRECT:
            try:
                check_redirect(element, rule)
            except UnsupportedRedirect:
                rule = None
        if rule is None:
            keys.add(prop.key)
    return keys


def _note(text: str, rule: Rule) -> str:
    return f"{text}  # {rule.comment}" if rule.comment else text


def process_element(
    element: Element,
    catalog: RuleCatalog,
    target_types: Iterable[str],
    document: str,
    namespace: str,
) -> ElementResult:
    """分析单个控件，返回待执行修改与审计记录，不修改控件本身。

    属性按其在控件上的声明顺序处理；多个属性映射到同一目标时，
    先出现者保留，后出现者被删除并记为冲突。控件上原样保留的同名属性
    同样算作已占用目标。
    """

    result = ElementResult()
    if not element.design_properties or element.type not in target_types:
        return result

    context = AuditContext(
        element=element.name or "Unnamed",
        element_type=element.type,
        document=document,
        namespace=namespace,
    )
    counts = result.counts
    claimed_targets = untouched_keys(element, catalog)
    spacing_items: list[SpacingContribution] = []
    existing_spacing = next(
        (p for p in element.design_properties if p.key == SPACING_PROPERTY), None
    )
    deletions: list[DeleteProperty] = []

    for prop in element.design_properties:
        if not prop.key or prop.key not in catalog.property_names:
            continue
        prop_value = extract_property_value(prop)
        if not prop_value:
            continue

        counts.props += 1
        rule = catalog.resolve(prop.key, prop_value, element.type)

        if rule is None:
            counts.skipped += 1
            result.records.append(
                context.record(prop.key, prop_value, DECISION_SKIPPED, reason=REASON_NO_MAPPING)
            )
            continue

        if rule.action == ACTION_REMOVE:
            deletions.append(DeleteProperty(element, prop))
            counts.removed += 1
            result.records.append(
                context.record(
                    prop.key,
                    prop_value,
                    DECISION_REMOVED,
                    reason=rule.reason or REASON_NO_WEB_EQUIVALENT,
                )
            )
            result.notes.append(_note(f"✗ {prop.key}", rule))
        elif rule.action == ACTION_MAP and rule.is_spacing:
            spacing_items.append(
                SpacingContribution(
                    prop=prop,
                    source_value=prop_value,
                    kind=rule.spacing_type,
                    side=rule.spacing_direction,
                    value=rule.mapped_value,
                )
            )
        elif rule.action == ACTION_MAP:
            target = rule.mapped_property
            if target in claimed_targets:
                # 删除冲突的后来者，避免两个属性改写到同一目标导致模型校验失败。
                deletions.append(DeleteProperty(element, prop))
                counts.removed += 1
                result.records.append(
                    context.record(
                        prop.key,
                        prop_value,
                        DECISION_REMOVED,
                        reason=REASON_COLLISION.format(target=target),
                    )
                )
                result.notes.append(f"✗ {prop.key} (与 `{target}` 冲突)")
                continue

            claimed_targets.add(target)
            result.mutations.append(
                RewriteProperty(element, prop, rule.mapped_property, rule.mapped_value)
            )
            counts.mapped += 1
            result.records.append(
                context.record(
                    prop.key,
                    prop_value,
                    DECISION_MAPPED,
                    mapped_property=rule.mapped_property,
                    mapped_value=rule.mapped_value,
                )
            )
            result.notes.append(
                _note(f'✓ {prop.key} → {rule.mapped_property}="{rule.mapped_value}"', rule)
            )
        elif rule.action == ACTION_REDIRECT:
            try:
                check_redirect(element, rule)
            except UnsupportedRedirect as exc:
                counts.skipped += 1
                result.warnings.append(f"{context.element}.{prop.key}: {exc}")
                result.records.append(
                    context.record(prop.key, prop_value, DECISION_SKIPPED, reason=str(exc))
                )
                continue

            result.mutations.append(SetAttribute(element, rule.widget_property, rule.widget_value))
            result.mutations.append(DeleteProperty(element, prop))
            counts.attribute_set += 1
            result.records.append(
                context.record(
                    prop.key,
                    prop_value,
                    DECISION_ATTRIBUTE_SET,
                    mapped_property=rule.widget_property,
                    mapped_value=rule.widget_value,
                    reason=rule.reason or REASON_WIDGET_PROPERTY,
                )
            )
            result.notes.append(
                _note(f'⚙ {prop.key} → widget.{rule.widget_property}="{rule.widget_value}"', rule)
            )

    result.mutations.extend(deletions)

    if spacing_items:
        spacing = aggregate_spacing(existing_spacing, spacing_items, context)
        result.mutations.append(ReplaceSpacing(element, existing_spacing, spacing.value))
        for item in spacing_items:
            result.mutations.append(DeleteProperty(element, item.prop))
        counts.mapped += len(spacing_items)
        result.records.extend(spacing.records)
        result.notes.extend(spacing.notes)

    if counts.props > 0:
        counts.widgets = 1
    return result


def process_page_properties(page: Document, namespace: str) -> ElementResult:
    """删除页面自身的全部设计属性：目标配置不支持在页面上设置设计属性。

    这里不经过规则查找。
    """

    result = ElementResult()
    context = AuditContext(
        element=page.qualified_name,
        element_type="Page",
        document=page.qualified_name,
        namespace=namespace,
    )
    for prop in page.design_properties:
        prop_key = prop.key or "Unknown"
        result.mutations.append(DeleteProperty(page, prop))
        result.records.append(
            context.record(
                prop_key,
                extract_property_value(prop),
                DECISION_REMOVED,
                reason=REASON_PAGE_UNSUPPORTED,
            )
        )
        result.notes.append(f"✗ {prop_key}")
    result.counts.props = len(page.design_properties)
    result.counts.removed = len(page.design_properties)
    return result
