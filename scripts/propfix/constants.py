"""迁移引擎使用的静态常量。"""

from __future__ import annotations

ACTION_MAP = "map"
ACTION_REMOVE = "remove"
ACTION_REDIRECT = "mapToWidgetProperty"
ACTIONS = (ACTION_MAP, ACTION_REMOVE, ACTION_REDIRECT)

WILDCARD = "*"

# 审计记录中的决策取值。
DECISION_MAPPED = "mapped"
DECISION_REMOVED = "removed"
DECISION_SKIPPED = "skipped"
DECISION_ATTRIBUTE_SET = "attributeSet"

SPACING_PROPERTY = "Spacing"
SPACING_KINDS = ("margin", "padding")
SPACING_SIDES = ("top", "right", "bottom", "left")
# 未设置的边统一用 None 占位，物化时不会写出。
SPACING_NONE = "None"

COMPOUND_MARKER = "[Compound]"

DEFAULT_RULES_FILE = "property-mappings.json"
DEFAULT_BRANCH = "Version_PWADesignPropertiesConversion"
DEFAULT_REPORT_DIR = "exports"
DEFAULT_EXCLUDED_NAMESPACES = ("System",)

# 只有这些控件类型会被修改，其余类型即使命中规则也保持原样。
DEFAULT_TARGET_TYPES = (
    "DynamicText",
    "DivContainer",
    "StaticImageViewer",
    "ListView",
    "ActionButton",
    "ReferenceSelector",
    "DropDown",
    "InputReferenceSetSelector",
    "CheckBox",
    "com.mendix.widget.native.badge.Badge",
    "TextArea",
    "ImageViewer",
    "Text",
)

# 控件属性重定向白名单：属性名 -> 支持的控件类型与可选枚举值。
# 不在表中的组合一律视为 UnsupportedRedirect，不做“猜测式”写入。
WIDGET_ATTRIBUTES = {
    "buttonStyle": {
        "element_types": frozenset({"ActionButton"}),
        "values": (
            "Default",
            "Inverse",
            "Primary",
            "Info",
            "Success",
            "Warning",
            "Danger",
        ),
    },
}

REASON_NO_MAPPING = "No mapping defined for this property/value/element combination"
REASON_NO_WEB_EQUIVALENT = "No Web equivalent"
REASON_PAGE_UNSUPPORTED = "Pages do not support design properties in the target profile"
REASON_WIDGET_PROPERTY = "Mapped to widget property"
REASON_COLLISION = "Duplicate target '{target}' - collision with prioritized mapping"
