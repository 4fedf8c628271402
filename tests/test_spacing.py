"""Spacing 合并行为测试。"""

from __future__ import annotations

import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SCRIPTS_DIR = ROOT / "scripts"
if str(SCRIPTS_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPTS_DIR))

from propfix.models import (  # noqa: E402
    AuditContext,
    CompoundValue,
    DesignProperty,
    OptionValue,
    SpacingContribution,
)
from propfix.spacing import aggregate_spacing, parse_spacing_state  # noqa: E402

CONTEXT = AuditContext("container1", "DivContainer", "Main.Home", "Main")


def spacing_prop(**sides: str) -> DesignProperty:
    return DesignProperty(
        key="Spacing",
        value=CompoundValue(
            properties=[
                DesignProperty(key=key.replace("_", "-"), value=OptionValue(value))
                for key, value in sides.items()
            ]
        ),
    )


def as_dict(value: CompoundValue) -> dict[str, str]:
    return {item.key: item.value.option for item in value.properties}


def contribution(key: str, kind: str, side: str, value: str) -> SpacingContribution:
    return SpacingContribution(
        prop=DesignProperty(key=key, value=OptionValue("Large")),
        source_value="Large",
        kind=kind,
        side=side,
        value=value,
    )


class SpacingAggregateTests(unittest.TestCase):
    def test_preserves_existing_sides(self) -> None:
        existing = spacing_prop(margin_top="Small")
        result = aggregate_spacing(
            existing, [contribution("Inner spacing left", "padding", "left", "M")], CONTEXT
        )
        self.assertEqual(as_dict(result.value), {"margin-top": "Small", "padding-left": "M"})

    def test_idempotent_on_migrated_element(self) -> None:
        existing = spacing_prop(margin_top="S", margin_bottom="L", padding_left="M")
        first = aggregate_spacing(existing, [], CONTEXT)
        second = aggregate_spacing(DesignProperty("Spacing", first.value), [], CONTEXT)
        self.assertEqual(as_dict(first.value), as_dict(existing.value))
        self.assertEqual(as_dict(second.value), as_dict(first.value))
        self.assertEqual(first.records, [])

    def test_empty_state_materializes_empty_compound(self) -> None:
        result = aggregate_spacing(None, [], CONTEXT)
        self.assertEqual(result.value.properties, [])

    def test_later_contribution_overwrites_and_is_noted(self) -> None:
        result = aggregate_spacing(
            spacing_prop(margin_top="S"),
            [
                contribution("Spacing top", "margin", "top", "L"),
                contribution("Spacing top large", "margin", "top", "L"),
            ],
            CONTEXT,
        )
        self.assertEqual(as_dict(result.value), {"margin-top": "L"})
        self.assertIn("(was: S)", result.notes[0])
        # 新旧值相同也要留下覆盖记录。
        self.assertIn("(was: L)", result.notes[1])

    def test_contributions_recorded_as_mapped(self) -> None:
        result = aggregate_spacing(
            None, [contribution("Spacing top", "margin", "top", "L")], CONTEXT
        )
        self.assertEqual(len(result.records), 1)
        record = result.records[0]
        self.assertEqual(record.action, "mapped")
        self.assertEqual(record.mapped_property, "Spacing")
        self.assertEqual(record.mapped_value, "margin.top=L")

    def test_output_order_is_canonical(self) -> None:
        result = aggregate_spacing(
            None,
            [
                contribution("a", "padding", "left", "M"),
                contribution("b", "margin", "bottom", "S"),
                contribution("c", "margin", "top", "L"),
            ],
            CONTEXT,
        )
        self.assertEqual(
            [item.key for item in result.value.properties],
            ["margin-top", "margin-bottom", "padding-left"],
        )


class SpacingParseTests(unittest.TestCase):
    def test_malformed_entries_are_ignored(self) -> None:
        prop = DesignProperty(
            key="Spacing",
            value=CompoundValue(
                properties=[
                    DesignProperty(key="margin-top", value=OptionValue("S")),
                    DesignProperty(key="margin", value=OptionValue("L")),
                    DesignProperty(key="border-top", value=OptionValue("L")),
                    DesignProperty(key="padding-top-left", value=OptionValue("L")),
                    DesignProperty(key="padding-right", value=None),
                ]
            ),
        )
        state = parse_spacing_state(prop)
        self.assertEqual(state["margin"]["top"], "S")
        self.assertEqual(state["padding"]["right"], "None")
        self.assertEqual(state["margin"]["left"], "None")

    def test_non_compound_spacing_is_ignored(self) -> None:
        self.assertIsNone(parse_spacing_state(DesignProperty("Spacing", OptionValue("Large"))))
        self.assertIsNone(parse_spacing_state(None))


if __name__ == "__main__":
    unittest.main()
