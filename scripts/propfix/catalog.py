"""规则文件加载、结构校验与规则查找。"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from .constants import (
    ACTION_MAP,
    ACTION_REDIRECT,
    ACTION_REMOVE,
    ACTIONS,
    SPACING_KINDS,
    SPACING_PROPERTY,
    SPACING_SIDES,
    WILDCARD,
)
from .errors import LoadError
from .models import Rule


@dataclass
class RuleCatalog:
    """加载完成后的只读规则索引。

    `lookup` 以 (属性名, 取值, 控件类型) 为键，通配规则以 "*" 作为控件类型；
    `property_names` 用于在构造查找键之前快速排除无关属性。
    """

    rules: list[Rule]
    lookup: dict[tuple[str, str, str], Rule]
    property_names: frozenset[str]
    warnings: list[str] = field(default_factory=list)

    def resolve(self, property_name: str, value: str, element_type: str) -> Rule | None:
        return resolve_rule(self, property_name, value, element_type)

    def count_by_action(self) -> dict[str, int]:
        counts = {action: 0 for action in ACTIONS}
        for rule in self.rules:
            counts[rule.action] += 1
        return counts


def resolve_rule(
    catalog: RuleCatalog, property_name: str, value: str, element_type: str
) -> Rule | None:
    """先按具体控件类型查找，再回落到通配规则；都没有时返回 None。

    同一属性/取值在不同控件上含义不同，因此具体类型必须优先于通配。
    """

    rule = catalog.lookup.get((property_name, value, element_type))
    if rule is not None:
        return rule
    return catalog.lookup.get((property_name, value, WILDCARD))


def normalize_match_value(raw: object) -> str:
    """把规则/属性中的原始值统一成查找用的字符串。"""

    if isinstance(raw, bool):
        return "true" if raw else "false"
    return str(raw)


def is_comment_entry(item: dict) -> bool:
    """缺少 property 或 value 的条目视为注释。"""

    for key in ("property", "value"):
        raw = item.get(key)
        if raw is None or raw == "":
            return True
    return False


def load_rule_entries(path: Path) -> list:
    """读取规则文件并返回规则数组。

    文件缺失、JSON 无法解析或顶层结构不符时抛出 LoadError，
    调用方据此在访问任何模型之前终止运行。
    """

    if not path.exists():
        raise LoadError(f"找不到规则文件: {path}")
    try:
        with path.open("r", encoding="utf-8") as fp:
            data = json.load(fp)
    except (OSError, ValueError) as exc:
        raise LoadError(f"无法解析规则文件 {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise LoadError("规则文件顶层不是 JSON 对象")
    entries = data.get("mappings", data.get("rules"))
    if not isinstance(entries, list):
        raise LoadError("规则文件缺少 `mappings` 数组")
    return entries


def validate_rule_entries(entries: list) -> tuple[list[str], list[str]]:
    """校验规则条目结构，不改写输入内容。

    errors 会让加载失败；warnings 只提示需要人工关注的覆盖/默认值行为。
    """

    errors: list[str] = []
    warnings: list[str] = []
    keys_seen: dict[tuple[str, str, str], int] = {}

    for idx, item in enumerate(entries, 1):
        if not isinstance(item, dict):
            errors.append(f"#{idx:02d} 规则不是对象，实际类型为 `{type(item).__name__}`。")
            continue
        if is_comment_entry(item):
            continue

        prop = str(item["property"])
        value = normalize_match_value(item["value"])
        label = f"#{idx:02d} `{prop}={value}`"

        action = item.get("action")
        if action not in ACTIONS:
            errors.append(f"{label} 的 action=`{action}` 未识别。")
            continue

        element_types = item.get("elementTypes")
        if not isinstance(element_types, list) or not element_types:
            errors.append(f"{label} 的 `elementTypes` 必须是非空数组。")
            continue

        if action == ACTION_MAP:
            if not item.get("mappedProperty") or not item.get("mappedValue"):
                errors.append(f"{label} 为 map 规则，但缺少 `mappedProperty`/`mappedValue`。")
            direction = item.get("mappedDirection")
            if direction:
                if direction not in SPACING_SIDES:
                    errors.append(f"{label} 的 mappedDirection=`{direction}` 不是合法方向。")
                if item.get("mappedProperty") != SPACING_PROPERTY:
                    errors.append(
                        f"{label} 带有 mappedDirection，但 mappedProperty 不是 `{SPACING_PROPERTY}`。"
                    )
                spacing_type = item.get("mappedType")
                if not spacing_type:
                    warnings.append(f"{label} 未声明 mappedType，按 margin 处理。")
                elif spacing_type not in SPACING_KINDS:
                    errors.append(f"{label} 的 mappedType=`{spacing_type}` 不是 margin/padding。")
        elif action == ACTION_REDIRECT:
            if not item.get("widgetProperty") or not item.get("widgetValue"):
                errors.append(f"{label} 缺少 `widgetProperty`/`widgetValue`。")

        for element_type in element_types:
            key = (prop, value, str(element_type))
            if key in keys_seen:
                warnings.append(
                    f"{label} 与 #{keys_seen[key]:02d} 在 `{element_type}` 上重复，后者生效。"
                )
            keys_seen[key] = idx

    return errors, warnings


def build_rule(item: dict) -> Rule:
    """把单个已校验条目转换为 Rule。"""

    action = item["action"]
    direction = ""
    spacing_type = ""
    if action == ACTION_MAP and item.get("mappedDirection"):
        direction = item["mappedDirection"]
        spacing_type = "padding" if item.get("mappedType") == "padding" else "margin"

    return Rule(
        property=str(item["property"]),
        value=normalize_match_value(item["value"]),
        element_types=frozenset(str(t) for t in item["elementTypes"]),
        action=action,
        mapped_property=str(item.get("mappedProperty") or "") if action == ACTION_MAP else "",
        mapped_value=str(item.get("mappedValue") or "") if action == ACTION_MAP else "",
        spacing_direction=direction,
        spacing_type=spacing_type,
        widget_property=str(item.get("widgetProperty") or "") if action == ACTION_REDIRECT else "",
        widget_value=str(item.get("widgetValue") or "") if action == ACTION_REDIRECT else "",
        reason=str(item.get("_reason") or item.get("reason") or ""),
        comment=str(item.get("_comment") or item.get("comment") or ""),
    )


def build_catalog(entries: list) -> RuleCatalog:
    """校验并索引规则条目；存在结构错误时抛出 LoadError。"""

    errors, warnings = validate_rule_entries(entries)
    if errors:
        raise LoadError("规则文件校验失败：\n" + "\n".join(f"  - {item}" for item in errors))

    rules: list[Rule] = []
    lookup: dict[tuple[str, str, str], Rule] = {}
    for item in entries:
        if is_comment_entry(item):
            continue
        rule = build_rule(item)
        rules.append(rule)
        # 同键重复时后出现的规则覆盖前者，与 warnings 中的提示保持一致。
        for element_type in rule.element_types:
            lookup[(rule.property, rule.value, element_type)] = rule

    return RuleCatalog(
        rules=rules,
        lookup=lookup,
        property_names=frozenset(rule.property for rule in rules),
        warnings=warnings,
    )


def load_rule_catalog(path: Path) -> RuleCatalog:
    return build_catalog(load_rule_entries(path))


def describe_catalog(catalog: RuleCatalog, source: Path) -> list[str]:
    """生成规则加载摘要，供启动时打印。"""

    counts = catalog.count_by_action()
    return [
        f"> 已从 {source.name} 加载 {len(catalog.rules)} 条属性规则",
        f"  - map: {counts[ACTION_MAP]}",
        f"  - remove: {counts[ACTION_REMOVE]}",
        f"  - mapToWidgetProperty: {counts[ACTION_REDIRECT]}",
        f"  - 涉及属性: {len(catalog.property_names)}",
    ]
