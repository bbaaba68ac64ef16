import copy
import json
import pytest
from diagtree.models.tree import DecisionTree

SCENARIO_NODES = [
    {
        "id": "start",
        "type": "question",
        "text": "Does the engine turn over?",
        "safety": "green",
        "options": [{"text": "Yes", "next": "A"}, {"text": "No", "next": "B"}],
    },
    {"id": "A", "type": "solution", "text": "Flooded", "safety": "green", "action": "Clear the flood"},
    {
        "id": "B",
        "type": "check",
        "text": "Check battery voltage",
        "safety": "yellow",
        "instructions": "Use a multimeter.",
        "next": "C",
    },
    {"id": "C", "type": "solution", "text": "Dead battery", "safety": "green", "action": "Charge battery"},
]

def _make_document(nodes, **metadata):
    document = {
        "title": "Engine Won't Start",
        "description": "Test tree",
        "category": "electrical",
        "difficulty": "beginner",
        "tree_data": {"nodes": nodes},
    }
    document.update(metadata)
    return document

@pytest.fixture
def scenario_nodes():
    return copy.deepcopy(SCENARIO_NODES)

@pytest.fixture
def make_document():
    return _make_document

@pytest.fixture
def scenario_tree(scenario_nodes):
    return DecisionTree.model_validate({"nodes": scenario_nodes})

@pytest.fixture
def trees_dir(tmp_path):
    """A directory holding one valid tree file, ``engine.json``."""
    directory = tmp_path / "trees"
    directory.mkdir()
    (directory / "engine.json").write_text(json.dumps(_make_document(copy.deepcopy(SCENARIO_NODES))), encoding="utf-8")
    return directory
