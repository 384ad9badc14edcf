from __future__ import annotations

import sys
import unittest
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from sbgnpathway.models import (
    AttachedBox,
    Compartment,
    Connection,
    Entity,
    Enzyme,
    IdGenerator,
    IntermediateElement,
    Marker,
    PathwayDataError,
    parse_pathway,
)


class ParsePathwayTests(unittest.TestCase):
    def test_rejects_non_pathway_shapes(self) -> None:
        with self.assertRaises(PathwayDataError):
            parse_pathway(None)
        with self.assertRaises(PathwayDataError):
            parse_pathway({"nodes": "glucose"})
        with self.assertRaises(PathwayDataError):
            parse_pathway({"nodes": ["glucose"]})

    def test_string_connections_are_main(self) -> None:
        pathway = parse_pathway({"nodes": [{"id": "a", "connections": ["b"]}, {"id": "b"}]})
        connection = pathway.nodes[0].connections[0]
        self.assertEqual(connection.target_id, "b")
        self.assertEqual(connection.kind, "main")
        self.assertFalse(connection.is_branch)

    def test_missing_ids_are_generated_deterministically(self) -> None:
        data = {"nodes": [{"label": "A"}, {"label": "B"}]}
        first = [node.id for node in parse_pathway(data).nodes]
        second = [node.id for node in parse_pathway(data).nodes]
        self.assertEqual(first, ["node-1", "node-2"])
        self.assertEqual(first, second)

    def test_dna_type_without_entity_type(self) -> None:
        pathway = parse_pathway({"nodes": [{"id": "g", "type": "DNA"}]})
        self.assertEqual(pathway.nodes[0].entity_type, "DNA")

    def test_marks_are_capped_and_nullable(self) -> None:
        raw = [{"type": "P"}, None, "O", {"type": "S"}, {"type": "N"}]
        entity = parse_pathway({"nodes": [{"id": "a", "marks": raw}]}).nodes[0]
        self.assertEqual(len(entity.marks), 4)
        self.assertIsNone(entity.marks[1])
        self.assertEqual(entity.marks[2].type, "O")

    def test_full_connection_fields(self) -> None:
        data = {
            "nodes": [
                {
                    "id": "a",
                    "connections": [
                        {
                            "targetId": "b",
                            "type": "branch",
                            "angle": "35",
                            "length": 180,
                            "sbgnClass": "inhibition",
                            "enzymes": ["Kinase", {"id": "e2", "label": "PP2A", "marker": {"type": "P"}}, 7],
                            "intermediateElement": {
                                "type": "association",
                                "label": "bind",
                                "attachedBox": {"label": "GTP", "side": "left"},
                            },
                            "endDecoration": "RNA",
                            "endDecorationLabel": "mRNA",
                        }
                    ],
                },
                {"id": "b"},
            ]
        }
        connection = parse_pathway(data).nodes[0].connections[0]
        self.assertTrue(connection.is_branch)
        self.assertEqual(connection.angle, 35.0)
        self.assertEqual(connection.length, 180.0)
        self.assertEqual([e.label for e in connection.enzymes], ["Kinase", "PP2A"])
        self.assertEqual(connection.enzymes[1].marker.type, "P")
        self.assertEqual(connection.intermediate_element.type, "association")
        self.assertEqual(connection.intermediate_element.attached_box.side, "left")
        self.assertEqual(connection.end_decoration, "RNA")

    def test_unknown_end_decoration_is_dropped(self) -> None:
        data = {"nodes": [{"id": "a", "connections": [{"targetId": "b", "endDecoration": "protein"}]}]}
        self.assertIsNone(parse_pathway(data).nodes[0].connections[0].end_decoration)

    def test_compartments_and_config(self) -> None:
        pathway = parse_pathway(
            {
                "nodes": [],
                "compartments": [{"id": "c", "label": "Cytosol", "y": 10, "intersectNodes": ["a"]}, "junk"],
                "config": {"width": 500},
            }
        )
        self.assertEqual(len(pathway.compartments), 1)
        self.assertEqual(pathway.compartments[0].intersect_nodes, ("a",))
        self.assertEqual(pathway.config, {"width": 500})


class ModelBuilderTests(unittest.TestCase):
    def test_entity_builders_return_new_instances(self) -> None:
        ids = IdGenerator()
        entity = Entity.from_dict({"id": "a"}, ids)
        connected = entity.add_connection(Connection.from_dict("b", ids))
        self.assertEqual(entity.connections, ())
        self.assertEqual(connected.connections[0].target_id, "b")

    def test_add_marker_pads_positions(self) -> None:
        entity = Entity(id="a").add_marker(Marker(id="m", type="P"), position=2)
        self.assertEqual(entity.marks, (None, None, Marker(id="m", type="P")))
        with self.assertRaises(ValueError):
            entity.add_marker(Marker(id="m"), position=4)

    def test_add_enzyme(self) -> None:
        connection = Connection(target_id="b").add_enzyme(Enzyme(id="e", label="Kinase"))
        self.assertEqual(connection.enzymes[0].label, "Kinase")

    def test_built_instances_pass_through(self) -> None:
        ids = IdGenerator()
        entity = Entity(id="a", connections=(Connection(target_id="b"),))
        self.assertIs(Entity.from_dict(entity, ids), entity)
        pathway = parse_pathway({"nodes": [entity, {"id": "b"}]})
        self.assertIs(pathway.nodes[0], entity)

    def test_to_dict_uses_wire_names(self) -> None:
        entity = parse_pathway(
            {"nodes": [{"id": "a", "entityType": "macromolecule", "connections": ["b"]}]}
        ).nodes[0]
        data = entity.to_dict()
        self.assertEqual(data["entityType"], "macromolecule")
        self.assertEqual(data["connections"][0]["targetId"], "b")
        self.assertEqual(data["connections"][0]["type"], "main")



class MalformedFieldTests(unittest.TestCase):
    def test_attached_box_falls_back_to_default_sizes(self) -> None:
        box = AttachedBox.from_dict({"width": None, "height": "tall", "strokeWidth": [2]})
        self.assertEqual((box.width, box.height, box.stroke_width), (80.0, 40.0, 2.0))
        self.assertEqual(AttachedBox.from_dict({"width": 0}).width, 0.0)

    def test_intermediate_element_falls_back_to_default_sizes(self) -> None:
        element = IntermediateElement.from_dict(
            {"label": "x", "width": None, "height": "", "size": "big", "strokeWidth": {}}
        )
        self.assertEqual(element.width, 120.0)
        self.assertEqual(element.height, 40.0)
        self.assertEqual(element.size, 20.0)
        self.assertEqual(element.stroke_width, 2.0)
        self.assertEqual(IntermediateElement.from_dict({"width": "64"}).width, 64.0)

    def test_compartment_stroke_width_falls_back(self) -> None:
        ids = IdGenerator()
        self.assertEqual(Compartment.from_dict({"strokeWidth": "thick"}, ids).stroke_width, 3.0)
        self.assertEqual(Compartment.from_dict({"strokeWidth": None}, ids).stroke_width, 3.0)
        self.assertEqual(Compartment.from_dict({"strokeWidth": "5"}, ids).stroke_width, 5.0)

    def test_text_fields_become_strings(self) -> None:
        data = {
            "nodes": [
                {
                    "id": "a",
                    "marks": [{"type": 1}, {"type": ""}],
                    "connections": [
                        {"targetId": "b", "endDecoration": "DNA", "endDecorationLabel": 5}
                    ],
                },
                {"id": "b"},
            ]
        }
        entity = parse_pathway(data).nodes[0]
        self.assertEqual(entity.marks[0].type, "1")
        self.assertIsNone(entity.marks[1].type)
        self.assertEqual(entity.connections[0].end_decoration_label, "5")

    def test_non_mapping_style_is_ignored(self) -> None:
        entity = Entity.from_dict({"id": "a", "style": "red"}, IdGenerator())
        self.assertEqual(entity.style, {})


if __name__ == "__main__":
    unittest.main()
