"""JSON 模型目录的加载、遍历与回写。

目录结构：`<root>/<namespace>/<document>.json`。文档与控件上未识别的字段
会原样保留，回写时不丢失。
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from .errors import TraversalError
from .models import (
    CompoundValue,
    DesignProperty,
    Document,
    Element,
    OptionValue,
    PropertyValue,
    ScalarValue,
    ToggleValue,
)
from .process import normalize_type_name

_ELEMENT_KEYS = ("name", "attributes", "designProperties", "widgets")
_DOCUMENT_KEYS = ("type", "name", "layout", "designProperties", "widgets")


def parse_value(raw: object) -> PropertyValue | None:
    if raw is None:
        return None
    if isinstance(raw, dict):
        if "option" in raw:
            return OptionValue(str(raw["option"] or ""))
        if "properties" in raw:
            return CompoundValue(properties=[parse_property(item) for item in raw["properties"]])
        if raw.get("toggle"):
            return ToggleValue()
        raise ValueError(f"无法识别的属性值结构: {sorted(raw)}")
    if isinstance(raw, (str, int, float, bool)):
        return ScalarValue(raw)
    raise ValueError(f"无法识别的属性值类型: {type(raw).__name__}")


def dump_value(value: PropertyValue | None) -> object:
    if value is None:
        return None
    if isinstance(value, OptionValue):
        return {"option": value.option}
    if isinstance(value, ToggleValue):
        return {"toggle": True}
    if isinstance(value, CompoundValue):
        return {"properties": [dump_property(item) for item in value.properties]}
    if isinstance(value, ScalarValue):
        return value.value
    raise TypeError(f"未知的属性值类型: {type(value).__name__}")


def parse_property(raw: dict) -> DesignProperty:
    if not isinstance(raw, dict):
        raise ValueError("设计属性必须是对象")
    return DesignProperty(key=str(raw.get("key") or ""), value=parse_value(raw.get("value")))


def dump_property(prop: DesignProperty) -> dict:
    return {"key": prop.key, "value": dump_value(prop.value)}


def parse_element(raw: dict) -> Element:
    if not isinstance(raw, dict):
        raise ValueError("控件必须是对象")
    return Element(
        type=normalize_type_name(str(raw.get("type") or ""), str(raw.get("widgetId") or "")),
        name=str(raw.get("name") or ""),
        design_properties=[parse_property(item) for item in raw.get("designProperties") or []],
        attributes=dict(raw.get("attributes") or {}),
        children=[parse_element(item) for item in raw.get("widgets") or []],
        # type/widgetId 原值保存在 extra 中，回写时保持原始写法。
        extra={k: v for k, v in raw.items() if k not in _ELEMENT_KEYS},
    )


def dump_element(element: Element) -> dict:
    data = dict(element.extra)
    data["name"] = element.name
    if element.attributes:
        data["attributes"] = dict(element.attributes)
    data["designProperties"] = [dump_property(item) for item in element.design_properties]
    if element.children:
        data["widgets"] = [dump_element(item) for item in element.children]
    return data


def parse_document(raw: object, namespace: str, qualified_name: str, path: Path | None) -> Document:
    if not isinstance(raw, dict):
        raise ValueError("文档顶层不是 JSON 对象")
    return Document(
        qualified_name=qualified_name,
        namespace=namespace,
        kind=str(raw.get("type") or "Page"),
        name=str(raw.get("name") or qualified_name),
        layout=str(raw["layout"]) if raw.get("layout") else None,
        design_properties=[parse_property(item) for item in raw.get("designProperties") or []],
        widgets=[parse_element(item) for item in raw.get("widgets") or []],
        path=path,
        extra={k: v for k, v in raw.items() if k not in _DOCUMENT_KEYS},
    )


def dump_document(document: Document) -> dict:
    data: dict = {"type": document.kind, "name": document.name}
    if document.layout is not None:
        data["layout"] = document.layout
    data.update(document.extra)
    data["designProperties"] = [dump_property(item) for item in document.design_properties]
    data["widgets"] = [dump_element(item) for item in document.widgets]
    return data


def traverse(document: Document, visit: Callable[[Element], None]) -> None:
    """深度优先、先序遍历文档中的全部控件。"""

    def walk(elements: list[Element]) -> None:
        for element in elements:
            visit(element)
            walk(element.children)

    walk(document.widgets)


@dataclass
class DocumentHandle:
    qualified_name: str
    namespace: str
    path: Path

    def load(self) -> Document:
        """读取并解析文档；任何读取或结构错误都转换为 TraversalError。"""

        try:
            with self.path.open("r", encoding="utf-8") as fp:
                raw = json.load(fp)
            return parse_document(raw, self.namespace, self.qualified_name, self.path)
        except (OSError, ValueError, TypeError) as exc:
            raise TraversalError(f"无法加载 `{self.qualified_name}`: {exc}") from exc


class JsonModelTree:
    """以目录形式存放的模型树。"""

    def __init__(self, root: Path) -> None:
        self.root = root

    def list_namespaces(self) -> list[str]:
        if not self.root.is_dir():
            raise TraversalError(f"模型目录不存在: {self.root}")
        return sorted(
            item.name
            for item in self.root.iterdir()
            if item.is_dir() and not item.name.startswith(".")
        )

    def list_documents(self, namespace: str) -> list[DocumentHandle]:
        namespace_dir = self.root / namespace
        return [
            DocumentHandle(
                qualified_name=f"{namespace}.{path.stem}",
                namespace=namespace,
                path=path,
            )
            for path in sorted(namespace_dir.glob("*.json"))
        ]

    def traverse(self, document: Document, visit: Callable[[Element], None]) -> None:
        traverse(document, visit)
