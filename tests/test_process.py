"""单控件属性决策测试。"""

from __future__ import annotations

import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SCRIPTS_DIR = ROOT / "scripts"
if str(SCRIPTS_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPTS_DIR))

from propfix.catalog import build_catalog  # noqa: E402
from propfix.constants import DEFAULT_TARGET_TYPES  # noqa: E402
from propfix.models import (  # noqa: E402
    CompoundValue,
    DeleteProperty,
    DesignProperty,
    Document,
    Element,
    OptionValue,
    ReplaceSpacing,
    RewriteProperty,
    ScalarValue,
    SetAttribute,
    ToggleValue,
)
from propfix.mutations import apply_mutations  # noqa: E402
from propfix.process import (  # noqa: E402
    extract_property_value,
    normalize_type_name,
    process_element,
    process_page_properties,
)

RULES = [
    {
        "property": "Justify content",
        "value": "Center",
        "elementTypes": ["DivContainer"],
        "action": "map",
        "mappedProperty": "Align content",
        "mappedValue": "Center",
    },
    {
        "property": "Justify content",
        "value": "Center",
        "elementTypes": ["ActionButton"],
        "action": "map",
        "mappedProperty": "Align content",
        "mappedValue": "Center align as a row",
    },
    {
        "property": "Render children horizontal",
        "value": "true",
        "elementTypes": ["ActionButton"],
        "action": "map",
        "mappedProperty": "Align content",
        "mappedValue": "Left align as a row",
    },
    {
        "property": "Elevation",
        "value": "true",
        "elementTypes": ["*"],
        "action": "remove",
        "_reason": "Shadows are styled by the Web theme",
    },
    {
        "property": "Spacing top",
        "value": "Large",
        "elementTypes": ["*"],
        "action": "map",
        "mappedProperty": "Spacing",
        "mappedValue": "L",
        "mappedDirection": "top",
        "mappedType": "margin",
    },
    {
        "property": "Inner spacing left",
        "value": "Medium",
        "elementTypes": ["*"],
        "action": "map",
        "mappedProperty": "Spacing",
        "mappedValue": "M",
        "mappedDirection": "left",
        "mappedType": "padding",
    },
    {
        "property": "Button style",
        "value": "Primary",
        "elementTypes": ["ActionButton", "DivContainer"],
        "action": "mapToWidgetProperty",
        "widgetProperty": "buttonStyle",
        "widgetValue": "Primary",
    },
    {
        "property": "Button style",
        "value": "Ghost",
        "elementTypes": ["ActionButton"],
        "action": "mapToWidgetProperty",
        "widgetProperty": "buttonStyle",
        "widgetValue": "Ghost",
    },
]

TARGETS = frozenset(DEFAULT_TARGET_TYPES)


def option(key: str, value: str) -> DesignProperty:
    return DesignProperty(key=key, value=OptionValue(value))


def run(element: Element):
    return process_element(element, build_catalog(RULES), TARGETS, "Main.Home", "Main")


class ProcessElementTests(unittest.TestCase):
    def test_map_on_matching_type(self) -> None:
        prop = option("Justify content", "Center")
        element = Element("DivContainer", "container1", [prop])
        result = run(element)

        self.assertEqual([r.action for r in result.records], ["mapped"])
        self.assertEqual(result.records[0].mapped_property, "Align content")
        self.assertEqual(result.counts.mapped, 1)
        self.assertEqual(result.counts.widgets, 1)
        self.assertEqual(len(result.mutations), 1)
        self.assertIsInstance(result.mutations[0], RewriteProperty)
        # 分析阶段不修改控件。
        self.assertEqual(prop.key, "Justify content")

        apply_mutations(result.mutations)
        self.assertEqual(prop.key, "Align content")
        self.assertEqual(prop.value, OptionValue("Center"))

    def test_same_rule_skipped_on_other_type(self) -> None:
        prop = option("Justify content", "Center")
        result = run(Element("ListView", "list1", [prop]))

        self.assertEqual([r.action for r in result.records], ["skipped"])
        self.assertIn("No mapping", result.records[0].reason)
        self.assertEqual(result.mutations, [])
        self.assertEqual(result.counts.skipped, 1)

    def test_collision_keeps_first_and_removes_later(self) -> None:
        first = DesignProperty("Render children horizontal", ToggleValue())
        second = option("Justify content", "Center")
        element = Element("ActionButton", "button1", [first, second])
        result = run(element)

        actions = [(r.property, r.action) for r in result.records]
        self.assertEqual(
            actions,
            [("Render children horizontal", "mapped"), ("Justify content", "removed")],
        )
        self.assertIn("collision", result.records[1].reason)

        apply_mutations(result.mutations)
        self.assertEqual([p.key for p in element.design_properties], ["Align content"])
        self.assertEqual(element.design_properties[0].value, OptionValue("Left align as a row"))

    def test_collision_follows_declaration_order(self) -> None:
        first = option("Justify content", "Center")
        second = DesignProperty("Render children horizontal", ToggleValue())
        element = Element("ActionButton", "button1", [first, second])
        apply_mutations(run(element).mutations)
        self.assertEqual(element.design_properties[0].value, OptionValue("Center align as a row"))
        self.assertEqual(len(element.design_properties), 1)

    def test_existing_target_property_blocks_rewrite(self) -> None:
        kept = option("Align content", "Right")
        element = Element("DivContainer", "c", [kept, option("Justify content", "Center")])
        result = run(element)

        self.assertEqual(
            [(r.property, r.action) for r in result.records],
            [("Justify content", "removed")],
        )
        self.assertIn("Duplicate target 'Align content'", result.records[0].reason)
        self.assertEqual(result.counts.mapped, 0)

        applied, failures = apply_mutations(result.mutations)
        self.assertEqual(failures, [])
        self.assertEqual(
            [(p.key, p.value) for p in element.design_properties],
            [("Align content", OptionValue("Right"))],
        )

    def test_existing_target_declared_later_still_wins(self) -> None:
        element = Element(
            "DivContainer",
            "c",
            [option("Justify content", "Center"), option("Align content", "Right")],
        )
        apply_mutations(run(element).mutations)
        self.assertEqual(
            [(p.key, p.value) for p in element.design_properties],
            [("Align content", OptionValue("Right"))],
        )

    def test_rule_comment_shown_in_notes(self) -> None:
        rules = RULES + [
            {
                "property": "Image fill",
                "value": "Cover",
                "elementTypes": ["*"],
                "action": "remove",
                "_comment": "object-fit is set by the theme",
            }
        ]
        element = Element("DivContainer", "c", [option("Image fill", "Cover")])
        result = process_element(element, build_catalog(rules), TARGETS, "Main.Home", "Main")
        self.assertEqual(result.notes, ["✗ Image fill  # object-fit is set by the theme"])

    def test_remove_action(self) -> None:
        element = Element("DivContainer", "c", [DesignProperty("Elevation", ScalarValue(True))])
        result = run(element)
        self.assertEqual(result.records[0].action, "removed")
        self.assertEqual(result.records[0].reason, "Shadows are styled by the Web theme")
        apply_mutations(result.mutations)
        self.assertEqual(element.design_properties, [])

    def test_spacing_properties_merge_into_existing(self) -> None:
        existing = DesignProperty(
            "Spacing",
            CompoundValue([option("margin-bottom", "S")]),
        )
        element = Element(
            "DivContainer",
            "c",
            [option("Spacing top", "Large"), existing, option("Inner spacing left", "Medium")],
        )
        result = run(element)

        self.assertEqual([r.action for r in result.records], ["mapped", "mapped"])
        self.assertEqual(result.counts.mapped, 2)
        self.assertEqual(result.counts.removed, 0)
        self.assertTrue(any(isinstance(m, ReplaceSpacing) for m in result.mutations))

        applied, failures = apply_mutations(result.mutations)
        self.assertEqual(failures, [])
        self.assertEqual([p.key for p in element.design_properties], ["Spacing"])
        spacing = element.design_properties[0].value
        self.assertEqual(
            {p.key: p.value.option for p in spacing.properties},
            {"margin-top": "L", "margin-bottom": "S", "padding-left": "M"},
        )

    def test_redirect_sets_attribute_and_deletes_property(self) -> None:
        prop = option("Button style", "Primary")
        element = Element("ActionButton", "b", [prop], attributes={"buttonStyle": "Default"})
        result = run(element)

        self.assertEqual(result.records[0].action, "attributeSet")
        self.assertEqual(result.counts.attribute_set, 1)
        self.assertIsInstance(result.mutations[0], SetAttribute)
        self.assertIsInstance(result.mutations[1], DeleteProperty)

        apply_mutations(result.mutations)
        self.assertEqual(element.attributes["buttonStyle"], "Primary")
        self.assertEqual(element.design_properties, [])

    def test_unsupported_redirect_is_skipped(self) -> None:
        on_container = Element("DivContainer", "c", [option("Button style", "Primary")])
        unknown_value = Element("ActionButton", "b", [option("Button style", "Ghost")])

        for element in (on_container, unknown_value):
            result = run(element)
            self.assertEqual(result.records[0].action, "skipped")
            self.assertEqual(result.mutations, [])
            self.assertEqual(len(result.warnings), 1)

    def test_non_target_type_emits_nothing(self) -> None:
        element = Element("LayoutGrid", "grid", [option("Justify content", "Center")])
        result = run(element)
        self.assertEqual(result.records, [])
        self.assertEqual(result.counts.widgets, 0)

    def test_irrelevant_and_empty_properties_are_ignored(self) -> None:
        element = Element(
            "DivContainer",
            "c",
            [option("Opacity", "50"), option("Justify content", ""), DesignProperty("Elevation")],
        )
        result = run(element)
        self.assertEqual(result.records, [])
        self.assertEqual(result.counts.props, 0)


class PagePropertyTests(unittest.TestCase):
    def test_all_page_properties_removed(self) -> None:
        page = Document(
            qualified_name="Main.Home",
            namespace="Main",
            kind="Page",
            name="Home",
            design_properties=[option("Background", "Dark"), DesignProperty("Safe area", ToggleValue())],
        )
        result = process_page_properties(page, "Main")
        self.assertEqual([r.action for r in result.records], ["removed", "removed"])
        self.assertIn("target profile", result.records[0].reason)
        self.assertEqual(result.counts.removed, 2)

        apply_mutations(result.mutations)
        self.assertEqual(page.design_properties, [])


class HelperTests(unittest.TestCase):
    def test_normalize_type_name(self) -> None:
        self.assertEqual(normalize_type_name("Pages$ActionButton"), "ActionButton")
        self.assertEqual(normalize_type_name("DivContainer"), "DivContainer")
        self.assertEqual(
            normalize_type_name("", "com.mendix.widget.native.badge.Badge"),
            "com.mendix.widget.native.badge.Badge",
        )

    def test_extract_property_value(self) -> None:
        self.assertEqual(extract_property_value(option("a", "Large")), "Large")
        self.assertEqual(extract_property_value(DesignProperty("a", ToggleValue())), "true")
        self.assertEqual(extract_property_value(DesignProperty("a", ScalarValue(False))), "false")
        self.assertEqual(extract_property_value(DesignProperty("a", ScalarValue(12))), "12")
        self.assertEqual(extract_property_value(DesignProperty("a", CompoundValue())), "[Compound]")
        self.assertEqual(extract_property_value(DesignProperty("a")), "")


if __name__ == "__main__":
    unittest.main()
