"""迁移过程中的数据模型。"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class OptionValue:
    """单选型属性值。"""

    option: str


@dataclass(frozen=True)
class ToggleValue:
    """开关型属性值：对象存在即表示“开启”。"""


@dataclass(frozen=True)
class ScalarValue:
    """历史数据中直接写成字符串/数字/布尔值的属性值。"""

    value: Union[str, int, float, bool]


@dataclass
class CompoundValue:
    """复合属性值，例如 Spacing 的盒模型结构。"""

    properties: list[DesignProperty] = field(default_factory=list)


PropertyValue = Union[OptionValue, ToggleValue, ScalarValue, CompoundValue]


# eq=False：属性、控件、文档都按对象身份比较，
# 同一控件上两条 key/value 完全相同的属性也必须能被单独删除。
@dataclass(eq=False)
class DesignProperty:
    key: str
    value: PropertyValue | None = None


@dataclass(eq=False)
class Element:
    """模型树中的一个控件节点。"""

    type: str
    name: str
    design_properties: list[DesignProperty] = field(default_factory=list)
    attributes: dict[str, object] = field(default_factory=dict)
    children: list[Element] = field(default_factory=list)
    extra: dict[str, object] = field(default_factory=dict)


@dataclass(eq=False)
class Document:
    """页面/片段/布局文档，以及文档自身的设计属性。"""

    qualified_name: str
    namespace: str
    kind: str
    name: str
    layout: str | None = None
    design_properties: list[DesignProperty] = field(default_factory=list)
    widgets: list[Element] = field(default_factory=list)
    path: object = None
    extra: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class Rule:
    """单条迁移规则。

    `action` 决定哪组载荷字段有效：map 使用 mapped_*（带方向时还会使用
    spacing_*），mapToWidgetProperty 使用 widget_*，remove 不使用载荷。
    """

    property: str
    value: str
    element_types: frozenset[str]
    action: str
    mapped_property: str = ""
    mapped_value: str = ""
    spacing_direction: str = ""
    spacing_type: str = ""
    widget_property: str = ""
    widget_value: str = ""
    reason: str = ""
    comment: str = ""

    @property
    def is_spacing(self) -> bool:
        return bool(self.spacing_direction)


@dataclass(frozen=True)
class AuditRecord:
    """单个属性决策的审计记录，创建后不再修改。"""

    element: str
    element_type: str
    document: str
    namespace: str
    property: str
    value: str
    action: str
    mapped_property: str = ""
    mapped_value: str = ""
    reason: str = ""

    def to_row(self) -> dict[str, str]:
        return {
            "element": self.element,
            "elementType": self.element_type,
            "document": self.document,
            "namespace": self.namespace,
            "property": self.property,
            "value": self.value,
            "action": self.action,
            "mappedProperty": self.mapped_property,
            "mappedValue": self.mapped_value,
            "reason": self.reason,
        }


@dataclass
class RewriteProperty:
    owner: Element | Document
    prop: DesignProperty
    key: str
    value: str


@dataclass
class DeleteProperty:
    owner: Element | Document
    prop: DesignProperty


@dataclass
class SetAttribute:
    owner: Element
    name: str
    value: str


@dataclass
class ReplaceSpacing:
    owner: Element
    existing: DesignProperty | None
    value: CompoundValue


Mutation = Union[RewriteProperty, DeleteProperty, SetAttribute, ReplaceSpacing]


@dataclass
class SpacingContribution:
    """一条待合并进 Spacing 的方向性间距映射。"""

    prop: DesignProperty
    source_value: str
    kind: str
    side: str
    value: str


@dataclass
class ProcessingCounts:
    widgets: int = 0
    props: int = 0
    mapped: int = 0
    removed: int = 0
    attribute_set: int = 0
    skipped: int = 0
    skipped_native_layouts: int = 0

    def add(self, other: ProcessingCounts) -> None:
        self.widgets += other.widgets
        self.props += other.props
        self.mapped += other.mapped
        self.removed += other.removed
        self.attribute_set += other.attribute_set
        self.skipped += other.skipped
        self.skipped_native_layouts += other.skipped_native_layouts

    @property
    def total_modified(self) -> int:
        return self.mapped + self.removed + self.attribute_set


@dataclass
class ElementResult:
    """单个控件（或页面）分析后的结果。

    只包含“计划做什么”，不对模型做任何修改；notes/warnings 交给编排层输出。
    """

    mutations: list[Mutation] = field(default_factory=list)
    records: list[AuditRecord] = field(default_factory=list)
    counts: ProcessingCounts = field(default_factory=ProcessingCounts)
    notes: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class AuditContext:
    """生成审计记录时共享的控件/文档身份信息。"""

    element: str
    element_type: str
    document: str
    namespace: str

    def record(
        self,
        prop: str,
        value: str,
        action: str,
        mapped_property: str = "",
        mapped_value: str = "",
        reason: str = "",
    ) -> AuditRecord:
        return AuditRecord(
            element=self.element,
            element_type=self.element_type,
            document=self.document,
            namespace=self.namespace,
            property=prop,
            value=value,
            action=action,
            mapped_property=mapped_property,
            mapped_value=mapped_value,
            reason=reason,
        )
