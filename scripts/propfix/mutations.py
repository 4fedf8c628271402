"""确认后执行待定修改。"""

from __future__ import annotations

from typing import Iterable

from .constants import SPACING_PROPERTY
from .errors import MutationApplyError
from .models import (
    DeleteProperty,
    DesignProperty,
    Mutation,
    OptionValue,
    ReplaceSpacing,
    RewriteProperty,
    SetAttribute,
)


def _index_of(properties: list[DesignProperty], prop: DesignProperty) -> int:
    for idx, item in enumerate(properties):
        if item is prop:
            return idx
    return -1


def describe_mutation(mutation: Mutation) -> str:
    owner = getattr(mutation.owner, "name", "") or "Unnamed"
    if isinstance(mutation, RewriteProperty):
        return f'{owner}: 改写 "{mutation.prop.key}" → {mutation.key}="{mutation.value}"'
    if isinstance(mutation, DeleteProperty):
        return f'{owner}: 删除 "{mutation.prop.key}"'
    if isinstance(mutation, SetAttribute):
        return f'{owner}: 设置 widget.{mutation.name}="{mutation.value}"'
    if isinstance(mutation, ReplaceSpacing):
        return f"{owner}: 替换 {SPACING_PROPERTY}"
    return f"{owner}: {type(mutation).__name__}"


def apply_mutation(mutation: Mutation) -> None:
    """执行单条修改；目标属性已不在控件上时抛出 MutationApplyError。"""

    if isinstance(mutation, RewriteProperty):
        properties = mutation.owner.design_properties
        if _index_of(properties, mutation.prop) < 0:
            raise MutationApplyError(f'属性 "{mutation.prop.key}" 已不在控件上')
        mutation.prop.key = mutation.key
        # 整体替换为单选值，旧值可能是复合值或历史遗留的标量。
        mutation.prop.value = OptionValue(mutation.value)
    elif isinstance(mutation, DeleteProperty):
        properties = mutation.owner.design_properties
        idx = _index_of(properties, mutation.prop)
        if idx < 0:
            raise MutationApplyError(f'属性 "{mutation.prop.key}" 已不在控件上')
        del properties[idx]
    elif isinstance(mutation, SetAttribute):
        mutation.owner.attributes[mutation.name] = mutation.value
    elif isinstance(mutation, ReplaceSpacing):
        properties = mutation.owner.design_properties
        # 先删后插，保证结构合法，而不是原地修改旧的复合值。
        if mutation.existing is not None:
            idx = _index_of(properties, mutation.existing)
            if idx >= 0:
                del properties[idx]
        properties.append(DesignProperty(key=SPACING_PROPERTY, value=mutation.value))
    else:
        raise MutationApplyError(f"未知的修改类型: {type(mutation).__name__}")


def apply_mutations(mutations: Iterable[Mutation]) -> tuple[int, list[str]]:
    """按排队顺序执行修改，单条失败只记录告警并继续。"""

    applied = 0
    failures: list[str] = []
    for mutation in mutations:
        try:
            apply_mutation(mutation)
        except MutationApplyError as exc:
            failures.append(f"{describe_mutation(mutation)}: {exc}")
            continue
        applied += 1
    return applied, failures
