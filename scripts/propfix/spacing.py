"""把多条方向性间距映射合并为单个 Spacing 复合属性。"""

from __future__ import annotations

from dataclasses import dataclass, field

from .constants import (
    DECISION_MAPPED,
    SPACING_KINDS,
    SPACING_NONE,
    SPACING_PROPERTY,
    SPACING_SIDES,
)
from .models import (
    AuditContext,
    AuditRecord,
    CompoundValue,
    DesignProperty,
    OptionValue,
    SpacingContribution,
)

SpacingState = dict[str, dict[str, str]]


@dataclass
class SpacingResult:
    value: CompoundValue
    records: list[AuditRecord] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


def empty_spacing_state() -> SpacingState:
    return {kind: {side: SPACING_NONE for side in SPACING_SIDES} for kind in SPACING_KINDS}


def parse_spacing_state(prop: DesignProperty | None) -> SpacingState | None:
    """解析已有 Spacing 属性，保留迁移前在 Web 端手工设置的间距。

    只识别 `margin-top` 这类 `类型-方向` 键且值为单选的条目；
    格式不符的条目直接忽略，不能让脏数据中断整批处理。
    """

    if prop is None or not isinstance(prop.value, CompoundValue):
        return None

    state = empty_spacing_state()
    for entry in prop.value.properties:
        if not entry.key or not isinstance(entry.value, OptionValue):
            continue
        if not entry.value.option:
            continue
        parts = entry.key.split("-")
        if len(parts) != 2:
            continue
        kind, side = parts
        if kind in SPACING_KINDS and side in SPACING_SIDES:
            state[kind][side] = entry.value.option
    return state


def materialize_spacing(state: SpacingState) -> CompoundValue:
    """按 margin/padding × 上右下左 的固定顺序生成复合值，跳过 None 边。"""

    properties: list[DesignProperty] = []
    for kind in SPACING_KINDS:
        for side in SPACING_SIDES:
            option = state[kind][side]
            if option == SPACING_NONE:
                continue
            properties.append(DesignProperty(key=f"{kind}-{side}", value=OptionValue(option)))
    return CompoundValue(properties=properties)


def aggregate_spacing(
    existing: DesignProperty | None,
    contributions: list[SpacingContribution],
    context: AuditContext,
) -> SpacingResult:
    """合并已有 Spacing 与本次收集到的方向性映射。

    贡献按属性处理顺序依次覆盖同一槽位；每次覆盖都会写入 notes，
    即使新旧值相同。每个来源属性都记为 mapped 而非 removed：
    对使用者而言它被并入了 Spacing，而不是被丢弃。
    """

    state = empty_spacing_state()
    parsed = parse_spacing_state(existing)
    if parsed is not None:
        for kind in SPACING_KINDS:
            state[kind].update(parsed[kind])

    result_notes: list[str] = []
    records: list[AuditRecord] = []
    for item in contributions:
        value = item.value or SPACING_NONE
        old_value = state[item.kind][item.side]
        state[item.kind][item.side] = value
        note = (
            f'→ Mapping: "{item.prop.key}"="{item.source_value}" → '
            f'{SPACING_PROPERTY} {item.kind}.{item.side}="{value}" (was: {old_value})'
        )
        result_notes.append(note)
        records.append(
            context.record(
                item.prop.key,
                item.source_value,
                DECISION_MAPPED,
                mapped_property=SPACING_PROPERTY,
                mapped_value=f"{item.kind}.{item.side}={item.value}",
            )
        )

    return SpacingResult(
        value=materialize_spacing(state),
        records=records,
        notes=result_notes,
    )
