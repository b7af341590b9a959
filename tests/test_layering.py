import ast
from pathlib import Path

import app.models.route_models as route_models
from app.models.playback_state import DriverState
from app.services import animation_driver

MODELS_DIR = Path(route_models.__file__).parent


def test_models_do_not_import_services():
    for source in MODELS_DIR.glob("*.py"):
        tree = ast.parse(source.read_text(encoding="utf-8"))
        for node in ast.walk(tree):
            if isinstance(node, ast.ImportFrom) and node.module:
                assert not node.module.startswith("app.services"), f"{source.name} imports {node.module}"


def test_driver_state_is_shared():
    assert route_models.DriverState is DriverState
    assert animation_driver.DriverState is DriverState
