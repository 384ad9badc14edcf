from __future__ import annotations

import sys
import unittest
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from sbgnpathway.config import ConfigError, PathwayConfig, build_config, style_mapping
from sbgnpathway.themes import BUILTIN_THEMES, ThemeRegistry


class ConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        config = build_config()
        self.assertEqual(config.layout.width, 800)
        self.assertEqual(config.layout.vertical_spacing, 120)
        self.assertTrue(config.layout.auto_resize)
        self.assertEqual(config.styles.marker.colors["P"], "#FFD700")

    def test_flat_and_nested_layout_keys(self) -> None:
        config = build_config({"width": 500, "verticalSpacing": 90})
        self.assertEqual(config.layout.width, 500)
        self.assertEqual(config.layout.vertical_spacing, 90)
        nested = build_config({"width": 500, "layout": {"width": 640}})
        self.assertEqual(nested.layout.width, 640)

    def test_partial_style_patch_keeps_other_fields(self) -> None:
        config = build_config({"styles": {"node": {"fill": "#000000"}}})
        self.assertEqual(config.styles.node.fill, "#000000")
        self.assertEqual(config.styles.node.stroke, "#333333")

    def test_marker_colors_merge(self) -> None:
        config = build_config({"styles": {"marker": {"colors": {"P": "#111111", "X": "#222222"}}}})
        self.assertEqual(config.styles.marker.color_for("P"), "#111111")
        self.assertEqual(config.styles.marker.color_for("O"), "#FF4444")
        self.assertEqual(config.styles.marker.color_for("X"), "#222222")
        self.assertEqual(config.styles.marker.color_for(None), "white")

    def test_update_returns_new_config(self) -> None:
        base = PathwayConfig()
        patched = base.update({"styles": {"connection": {"curve": "curved"}}})
        self.assertEqual(base.styles.connection.curve, "linear")
        self.assertEqual(patched.styles.connection.curve, "curved")

    def test_theme_styles_lose_to_patch(self) -> None:
        config = build_config(
            {"styles": {"node": {"fill": "#ABCDEF"}}},
            theme_styles=BUILTIN_THEMES["dark"].styles,
        )
        self.assertEqual(config.styles.node.fill, "#ABCDEF")
        self.assertEqual(config.styles.node.stroke, "#E2E8F0")

    def test_sbgn_style_tables_merge(self) -> None:
        config = build_config({"sbgnEntityStyles": {"macromolecule": {"fill": "#000000"}}})
        self.assertEqual(config.entity_styles["macromolecule"]["fill"], "#000000")
        self.assertEqual(config.entity_styles["macromolecule"]["cornerRadius"], 15)
        self.assertIn("complex", config.entity_styles)

    def test_malformed_patches_raise(self) -> None:
        with self.assertRaises(ConfigError):
            build_config({"styles": "dark"})
        with self.assertRaises(ConfigError):
            build_config({"styles": {"node": ["fill"]}})
        with self.assertRaises(ConfigError):
            build_config({"width": "wide"})
        with self.assertRaises(ConfigError):
            PathwayConfig().update(["width", 10])

    def test_boolean_fields_need_real_booleans(self) -> None:
        self.assertFalse(build_config({"autoResize": False}).layout.auto_resize)
        with self.assertRaises(ConfigError):
            build_config({"autoResize": "false"})
        with self.assertRaises(ConfigError):
            build_config({"styles": {"node": {"dropShadow": 1}}})

    def test_unknown_keys_are_ignored(self) -> None:
        config = build_config({"styles": {"nonsense": {"a": 1}}, "colour": "red"})
        self.assertEqual(config, PathwayConfig())

    def test_style_mapping_is_camel_case(self) -> None:
        mapping = style_mapping(PathwayConfig().styles.node)
        self.assertIn("strokeWidth", mapping)
        self.assertIn("labelFontFamily", mapping)


class ThemeRegistryTests(unittest.TestCase):
    def test_builtin_listing(self) -> None:
        listing = ThemeRegistry().list_themes()
        ids = [theme["id"] for theme in listing]
        self.assertEqual(ids, ["default", "dark", "blueprint", "scientific", "colorful"])
        self.assertFalse(any(theme["is_custom"] for theme in listing))

    def test_unknown_theme_falls_back_to_default(self) -> None:
        registry = ThemeRegistry()
        with self.assertLogs("sbgnpathway.themes", level="WARNING") as logs:
            theme = registry.get_theme("neon")
        self.assertIs(theme, BUILTIN_THEMES["default"])
        self.assertIn("neon", logs.output[0])

    def test_custom_themes_are_per_registry(self) -> None:
        first = ThemeRegistry().register_theme("mine", {"node": {"fill": "#010101"}})
        second = ThemeRegistry()
        self.assertTrue(first.has_theme("mine"))
        self.assertFalse(second.has_theme("mine"))
        entry = first.list_themes()[-1]
        self.assertEqual(entry["id"], "mine")
        self.assertTrue(entry["is_custom"])
        self.assertEqual(entry["description"], "Custom theme: mine")

    def test_registered_styles_are_copied(self) -> None:
        styles = {"node": {"fill": "#010101"}}
        registry = ThemeRegistry().register_theme("mine", styles)
        styles["node"]["fill"] = "#FFFFFF"
        self.assertEqual(registry.get_theme("mine").styles["node"]["fill"], "#010101")

    def test_invalid_registration(self) -> None:
        with self.assertRaises(ValueError):
            ThemeRegistry().register_theme("")
        with self.assertRaises(TypeError):
            ThemeRegistry().register_theme("bad", "not a mapping")


if __name__ == "__main__":
    unittest.main()
