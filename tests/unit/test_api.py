"""
Tests for the HTTP surface (exactgeo.api.main) using FastAPI's TestClient.
"""
import pytest
from fastapi.testclient import TestClient

from exactgeo.api.main import app


@pytest.fixture
def client():
    return TestClient(app)


def _pt(x, y):
    return {"type": "point", "x": x, "y": y}


class TestIntersectEndpoint:
    """POST /intersect"""

    def test_line_line(self, client) -> None:
        body = {
            "first": {"type": "line", "through": [_pt(0, 0), _pt(1, 1)]},
            "second": {"type": "line", "through": [_pt(0, 1), _pt(1, 0)]},
        }
        resp = client.post("/intersect", json=body)
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "points"
        [p] = data["points"]
        assert p["x"] == {"kind": "rational", "value": "1/2", "expr": None, "interval": None}
        assert p["approx"] == [0.5, 0.5]

    def test_line_circle_oracle(self, client) -> None:
        body = {
            "first": {"type": "line", "coeffs": [1, 0, 0]},
            "second": {"type": "circle", "center": _pt(0, 0), "radius_squared": "2"},
        }
        data = client.post("/intersect", json=body).json()
        assert len(data["points"]) == 2
        y = data["points"][1]["y"]
        assert y["kind"] == "oracle"
        assert "sqrt(2/1)" in y["expr"]
        assert y["interval"].startswith("[")
        assert data["points"][1]["approx"][1] == pytest.approx(2 ** 0.5, abs=1e-4)

    def test_coincident(self, client) -> None:
        body = {
            "first": {"type": "circle", "center": _pt(0, 0), "radius": 2},
            "second": {"type": "circle", "center": _pt(0, 0), "point_on_circumference": _pt(0, 2)},
        }
        data = client.post("/intersect", json=body).json()
        assert data == {"status": "coincident", "points": []}

    def test_segment(self, client) -> None:
        body = {
            "first": {"type": "segment", "start": _pt(0, 0), "end": _pt(1, 1)},
            "second": {"type": "ray", "origin": _pt(0, 1), "through": _pt("1/2", "1/2")},
        }
        data = client.post("/intersect", json=body).json()
        assert [p["x"]["value"] for p in data["points"]] == ["1/2"]

    def test_degenerate_line(self, client) -> None:
        body = {
            "first": {"type": "line", "through": [_pt(1, 1), _pt(1, 1)]},
            "second": {"type": "line", "coeffs": [1, 0, 0]},
        }
        assert client.post("/intersect", json=body).status_code == 400

    def test_float_rejected(self, client) -> None:
        body = {
            "first": {"type": "line", "coeffs": [1.5, 0, 0]},
            "second": {"type": "line", "coeffs": [0, 1, 0]},
        }
        assert client.post("/intersect", json=body).status_code == 422

    def test_bad_rational_string(self, client) -> None:
        body = {
            "first": {"type": "line", "coeffs": ["one", 0, 0]},
            "second": {"type": "line", "coeffs": [0, 1, 0]},
        }
        assert client.post("/intersect", json=body).status_code == 422

    def test_point_cannot_be_intersected(self, client) -> None:
        body = {"first": _pt(0, 0), "second": {"type": "line", "coeffs": [0, 1, 0]}}
        assert client.post("/intersect", json=body).status_code == 422


class TestPredicateEndpoint:
    """POST /predicate"""

    def test_collinear(self, client) -> None:
        body = {"predicate": "collinear", "points": [_pt(0, 0), _pt(1, 1), _pt(2, 2)]}
        assert client.post("/predicate", json=body).json() == {"predicate": "collinear", "result": True}

    def test_on_circle(self, client) -> None:
        body = {
            "predicate": "on_circle",
            "points": [_pt(3, 4)],
            "circles": [{"type": "circle", "center": _pt(0, 0), "radius": 5}],
        }
        assert client.post("/predicate", json=body).json()["result"] is True

    def test_concurrent(self, client) -> None:
        body = {
            "predicate": "concurrent",
            "lines": [
                {"type": "line", "coeffs": [1, 0, 0]},
                {"type": "line", "coeffs": [1, 0, -1]},
                {"type": "line", "coeffs": [0, 1, 0]},
            ],
        }
        assert client.post("/predicate", json=body).json()["result"] is False

    def test_wrong_operand_count(self, client) -> None:
        body = {"predicate": "parallel", "lines": [{"type": "line", "coeffs": [1, 0, 0]}]}
        assert client.post("/predicate", json=body).status_code == 422

    def test_unknown_predicate(self, client) -> None:
        assert client.post("/predicate", json={"predicate": "tangent"}).status_code == 422


def test_root(client) -> None:
    assert client.get("/").status_code == 200
