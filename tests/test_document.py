from __future__ import annotations

import sys
import unittest
import xml.etree.ElementTree as ET
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from sbgnpathway import (
    ConfigError,
    PathwayConfig,
    PathwayDataError,
    SBGNPathway,
    compose,
    list_examples,
    load_example,
    render,
)
from sbgnpathway.svg import q
from sbgnpathway.text import TextMeasurer

MEASURER = TextMeasurer(use_fonts=False)

CHAIN = {
    "nodes": [
        {"id": "glucose", "label": "Glucose", "entityType": "simpleChemical", "connections": ["g6p"]},
        {"id": "g6p", "label": "G6P", "entityType": "simpleChemical"},
    ],
    "compartments": [{"id": "cytosol", "label": "Cytosol", "y": -60, "intersectNodes": ["glucose"]}],
}


def _classes(root: ET.Element) -> list:
    return [child.get("class") for child in root]


class ComposeTests(unittest.TestCase):
    def test_document_structure_and_layer_order(self) -> None:
        root = compose(CHAIN, measurer=MEASURER)
        self.assertEqual(root.tag, q("svg"))
        self.assertEqual([child.tag for child in root], [q("style"), q("defs"), q("g")])
        wrapper = root.find(q("g"))
        self.assertEqual(wrapper.get("id"), "pathway-content-wrapper")
        self.assertEqual(
            _classes(wrapper), ["sbgn-compartments", "sbgn-connection-layer", "sbgn-node-layer"]
        )

    def test_defs_hold_markers_and_compartment_masks(self) -> None:
        defs = compose(CHAIN, measurer=MEASURER).find(q("defs"))
        ids = {child.get("id") for child in defs}
        for expected in (
            "arrowhead",
            "inhibition",
            "catalysis",
            "stimulation",
            "dropShadow",
            "nodeGradient",
            "gradient-cytosol",
            "mask-cytosol",
        ):
            self.assertIn(expected, ids)

    def test_height_fits_content(self) -> None:
        root = compose(CHAIN, measurer=MEASURER)
        self.assertEqual(root.get("width"), "800")
        self.assertEqual(root.get("height"), "480")
        self.assertEqual(root.get("viewBox"), "0 0 800 480")

    def test_fixed_height_without_auto_resize(self) -> None:
        root = compose(CHAIN, config={"layout": {"autoResize": False}}, measurer=MEASURER)
        self.assertEqual(root.get("height"), "1600")

    def test_empty_pathway_uses_configured_height(self) -> None:
        root = compose({"nodes": []}, measurer=MEASURER)
        self.assertEqual(root.get("height"), "1600")
        self.assertEqual(len(root.find(q("g")).find(q("g")).findall(q("g"))), 0)

    def test_data_config_applies_to_one_render(self) -> None:
        base = PathwayConfig()
        data = dict(CHAIN, config={"width": 500})
        root = compose(data, config=base, measurer=MEASURER)
        self.assertEqual(root.get("width"), "500")
        self.assertEqual(base.layout.width, 800)
        self.assertEqual(compose(CHAIN, config=base, measurer=MEASURER).get("width"), "800")

    def test_unresolved_compartment_is_skipped(self) -> None:
        data = dict(CHAIN, compartments=[{"id": "nowhere", "y": 10, "intersectNodes": ["ghost"]}])
        layer = compose(data, measurer=MEASURER).find(q("g")).find(q("g"))
        self.assertEqual(list(layer), [])

    def test_render_returns_svg_text(self) -> None:
        svg = render(CHAIN, measurer=MEASURER)
        self.assertTrue(svg.startswith("<svg"))
        self.assertIn('xmlns="http://www.w3.org/2000/svg"', svg)
        self.assertIn('data-node-id="glucose"', svg)
        ET.fromstring(svg)

    def test_malformed_optional_fields_still_render(self) -> None:
        data = {
            "nodes": [
                {
                    "id": "a",
                    "marks": [{"type": 1}],
                    "connections": [
                        {
                            "targetId": "b",
                            "endDecoration": "DNA",
                            "endDecorationLabel": 5,
                            "intermediateElement": {
                                "label": "x",
                                "width": None,
                                "size": "big",
                                "attachedBox": {"label": "GTP", "height": "tall"},
                            },
                        }
                    ],
                },
                {"id": "b"},
            ],
            "compartments": [{"y": 10, "intersectNodes": ["a"], "strokeWidth": "thick"}],
        }
        root = ET.fromstring(render(data, measurer=MEASURER))
        texts = [el.text for el in root.iter(q("text"))]
        self.assertIn("1", texts)
        self.assertIn("5", texts)
        boundary = next(
            el for el in root.iter(q("path")) if el.get("class") == "sbgn-compartment-boundary"
        )
        self.assertEqual(boundary.get("stroke-width"), "3")

    def test_arrowhead_follows_arrow_size(self) -> None:
        defs = compose(CHAIN, measurer=MEASURER).find(q("defs"))
        polygon = defs.find(q("marker")).find(q("polygon"))
        self.assertEqual(polygon.get("points"), "0 0, 10 3.5, 0 7")
        config = {"styles": {"connection": {"arrowSize": 8}}}
        marker = compose(CHAIN, config=config, measurer=MEASURER).find(q("defs")).find(q("marker"))
        self.assertEqual((marker.get("markerWidth"), marker.get("refX")), ("8", "7.2"))
        self.assertEqual(marker.find(q("polygon")).get("points"), "0 0, 8 2.8, 0 5.6")

    def test_style_fills_can_use_defined_gradients(self) -> None:
        config = {"styles": {"node": {"fill": "url(#nodeGradient)"}}}
        root = compose({"nodes": [{"id": "a", "label": "A"}]}, config=config, measurer=MEASURER)
        fills = {el.get("fill") for el in root.iter(q("ellipse"))}
        self.assertIn("url(#nodeGradient)", fills)
        svg = render(load_example("glycolysis"), measurer=MEASURER)
        self.assertIn('fill="url(#enzymeGradient)"', svg)

    def test_rejects_non_pathway_data(self) -> None:
        with self.assertRaises(PathwayDataError):
            render([], measurer=MEASURER)
        with self.assertRaises(ConfigError):
            render(CHAIN, config={"styles": 3}, measurer=MEASURER)

    def test_bundled_examples_render_every_node(self) -> None:
        for name in list_examples():
            with self.subTest(example=name):
                data = load_example(name)
                root = compose(data, measurer=MEASURER)
                nodes = [el for el in root.iter(q("g")) if "sbgn-node" in (el.get("class") or "").split()]
                self.assertEqual(len(nodes), len(data["nodes"]))


class SBGNPathwayTests(unittest.TestCase):
    def test_theme_is_applied(self) -> None:
        pathway = SBGNPathway(theme="dark", measurer=MEASURER)
        self.assertEqual(pathway.theme, "dark")
        self.assertEqual(pathway.config.styles.node.fill, "#2D3748")

    def test_patches_survive_theme_changes(self) -> None:
        pathway = SBGNPathway(measurer=MEASURER)
        pathway.set_config({"styles": {"node": {"fill": "#123456"}}})
        pathway.apply_theme("dark")
        self.assertEqual(pathway.config.styles.node.fill, "#123456")
        self.assertEqual(pathway.config.styles.node.stroke, "#E2E8F0")

    def test_unknown_theme_falls_back(self) -> None:
        pathway = SBGNPathway(measurer=MEASURER).apply_theme("dark")
        with self.assertLogs("sbgnpathway.document", level="WARNING"):
            pathway.apply_theme("neon")
        self.assertEqual(pathway.theme, "default")
        self.assertEqual(pathway.config, PathwayConfig())

    def test_bad_patch_leaves_config_untouched(self) -> None:
        pathway = SBGNPathway(measurer=MEASURER)
        before = pathway.config
        with self.assertRaises(ConfigError):
            pathway.set_config("wide")
        with self.assertRaises(ConfigError):
            pathway.set_config({"styles": []})
        self.assertIs(pathway.config, before)

    def test_custom_theme(self) -> None:
        pathway = SBGNPathway(measurer=MEASURER)
        pathway.register_theme("mint", {"node": {"fill": "#E6FFFA"}}).apply_theme("mint")
        self.assertEqual(pathway.config.styles.node.fill, "#E6FFFA")
        self.assertIn("mint", [theme["id"] for theme in pathway.list_themes()])

    def test_builders_generate_ids(self) -> None:
        pathway = SBGNPathway()
        first = pathway.create_node(label="Glucose")
        second = pathway.create_node({"label": "G6P"}, entityType="simpleChemical")
        connection = pathway.create_connection(targetId=second.id, type="branch")
        self.assertEqual((first.id, second.id), ("node-1", "node-2"))
        self.assertEqual(second.entity_type, "simpleChemical")
        self.assertTrue(connection.is_branch)

    def test_render_with_built_entities(self) -> None:
        pathway = SBGNPathway(measurer=MEASURER)
        target = pathway.create_node(id="b", label="B")
        source = pathway.create_node(id="a", label="A").add_connection(
            pathway.create_connection(targetId="b")
        )
        svg = pathway.render({"nodes": [source, target]})
        self.assertIn('data-connection-id="a-b"', svg)


if __name__ == "__main__":
    unittest.main()
