import json

import pytest

from surfacegrid.cube import CubeSphereGrid
from surfacegrid.io import grid_from_dict, load_json, save_json, validate_grid_payload
from surfacegrid.rectangle import RectangleSphereGrid


@pytest.fixture
def rectangle():
    return RectangleSphereGrid.from_fn(4, 2, lambda p: p.x * p.y)


@pytest.fixture
def cube():
    return CubeSphereGrid.from_fn(2, lambda p: f"{p.face.value}:{p.x}{p.y}")


def test_rectangle_round_trip_json(rectangle):
    loaded = RectangleSphereGrid.from_json(rectangle.to_json())
    assert loaded == rectangle


def test_cube_round_trip_json(cube):
    loaded = CubeSphereGrid.from_json(cube.to_json(indent=2))
    assert loaded == cube


def test_payload_layout(rectangle, cube):
    payload = rectangle.to_dict()
    assert payload["topology"] == "rectangle"
    assert (payload["width"], payload["height"]) == (4, 2)
    assert payload["rows"] == [[0, 0, 0, 0], [0, 1, 2, 3]]

    payload = cube.to_dict()
    assert payload["size"] == 2
    assert list(payload["rows"]) == ["top", "left", "front", "right", "back", "bottom"]
    assert payload["rows"]["front"][1][0] == "front:01"


def test_save_and_load(tmp_path, rectangle, cube):
    for grid, name in ((rectangle, "rect.json"), (cube, "cube.json")):
        path = tmp_path / name
        save_json(grid, path)
        assert json.loads(path.read_text(encoding="utf-8"))["version"] == "1.0"
        assert load_json(path) == grid


def test_grid_from_dict_dispatches(rectangle, cube):
    assert isinstance(grid_from_dict(rectangle.to_dict()), RectangleSphereGrid)
    assert isinstance(grid_from_dict(cube.to_dict()), CubeSphereGrid)


def test_validate_valid_payloads(rectangle, cube):
    assert validate_grid_payload(rectangle.to_dict()) == []
    assert validate_grid_payload(cube.to_dict()) == []


def test_validate_unknown_topology():
    errors = validate_grid_payload({"topology": "hex"})
    assert len(errors) == 1 and "topology" in errors[0]
    assert validate_grid_payload([]) != []


def test_validate_rectangle_rows(rectangle):
    payload = rectangle.to_dict()
    payload["rows"] = payload["rows"][:1]
    assert any("expected 2 rows" in e for e in validate_grid_payload(payload))

    payload = rectangle.to_dict()
    payload["width"] = 5
    assert validate_grid_payload(payload) != []


def test_validate_cube_faces(cube):
    payload = cube.to_dict()
    del payload["rows"]["back"]
    payload["rows"]["top"][0] = ["only one"]
    errors = validate_grid_payload(payload)
    assert any("missing face 'back'" in e for e in errors)
    assert any(e.startswith("rows.top[0]") for e in errors)


def test_from_dict_rejects_invalid(cube):
    payload = cube.to_dict()
    payload["size"] = 3
    with pytest.raises(ValueError):
        CubeSphereGrid.from_dict(payload)
    with pytest.raises(ValueError):
        RectangleSphereGrid.from_dict(cube.to_dict())
    with pytest.raises(ValueError):
        grid_from_dict({"topology": "cube", "size": 0, "rows": {}})
