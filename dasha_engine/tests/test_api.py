from fastapi.testclient import TestClient

from main import app

client = TestClient(app)

CHART = {
    "birth": "2000-01-01T00:00:00+00:00",
    "ascendant": 10.0,
    "planets": {
        "Sun":     {"longitude": 60.5,   "house": 3},
        "Moon":    {"longitude": 123.45, "house": 5},
        "Mars":    {"longitude": 200.0,  "house": 7},
        "Mercury": {"longitude": 75.0,   "house": 3},
        "Jupiter": {"longitude": 95.0,   "house": 4},
        "Venus":   {"longitude": 40.0,   "house": 2},
        "Saturn":  {"longitude": 290.0,  "house": 10},
        "Rahu":    {"longitude": 310.0,  "house": 11},
        "Ketu":    {"longitude": 130.0,  "house": 5},
    },
}


def test_health():
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_dasha_report():
    payload = {"chart": CHART, "system": "vimshottari", "depth": 2,
               "as_of": "2010-06-01T00:00:00+00:00"}
    r = client.post("/api/dasha", json=payload)
    assert r.status_code == 200, f"Unexpected {r.status_code}: {r.text}"
    data = r.json()["dasha"]
    assert data["current"]["status"] == "found"
    assert len(data["periods"]) == 9


def test_current_dasha_before_birth_is_404():
    payload = {"chart": CHART, "as_of": "1999-01-01T00:00:00+00:00"}
    r = client.post("/api/dasha/current", json=payload)
    assert r.status_code == 404


def test_current_dasha_found():
    payload = {"chart": CHART, "as_of": "2010-06-01T00:00:00+00:00", "depth": 3}
    r = client.post("/api/dasha/current", json=payload)
    assert r.status_code == 200
    assert len(r.json()["current"]["periods"]) == 3


def test_naive_as_of_is_400():
    r = client.post("/api/dasha", json={"chart": CHART, "as_of": "2010-06-01T00:00:00"})
    assert r.status_code == 400


def test_invalid_requests_are_422():
    naive = dict(CHART, birth="2000-01-01T00:00:00")
    assert client.post("/api/dasha", json={"chart": naive}).status_code == 422
    assert client.post("/api/dasha", json={"chart": CHART, "system": "chara"}).status_code == 422
    bad_lon = dict(CHART, ascendant=360.0)
    assert client.post("/api/dasha", json={"chart": bad_lon}).status_code == 422


def test_sandhi():
    payload = {"chart": CHART, "as_of": "2005-03-01T00:00:00+00:00", "lookahead_days": 365}
    r = client.post("/api/dasha/sandhi", json=payload)
    assert r.status_code == 200
    windows = r.json()["sandhi"]
    assert windows[0]["from"] == "Ketu"
    assert windows[0]["to"] == "Venus"


def test_sudarshana_by_age():
    r = client.post("/api/sudarshana", json={"chart": CHART, "age": 4})
    assert r.status_code == 200
    year = r.json()["sudarshana"]
    assert year["house_in_cycle"] == 4
    assert year["positions"][0]["active_sign"] == "Cancer"


def test_matchmaker_identical_charts():
    r = client.post("/api/matchmaker", json={"bride": CHART, "groom": CHART, "bride_age": 30})
    assert r.status_code == 200
    compatibility = r.json()["compatibility"]
    assert compatibility["total_score"] == 28
    assert compatibility["kootas"]["nadi"]["score"] == 0
    assert compatibility["doshas"]["Nadi Dosha"]["present"] is True
    assert compatibility["manglik"]["bride"]["is_manglik"] is False
    assert compatibility["manglik"]["groom"]["is_manglik"] is True


def test_vedha():
    r = client.post("/api/vedha", json={"natal_moon_sign": 0, "transit_signs": {"Jupiter": 4}})
    assert r.status_code == 200
    vedha = r.json()["vedha"]
    assert vedha["overall_score"] == 80
    assert vedha["transits"][0]["effectiveness"] == "Good"


def test_current_dasha_depth_is_honoured_across_requests():
    base = {"chart": CHART, "as_of": "2012-03-01T00:00:00+00:00"}
    shallow = client.post("/api/dasha/current", json=dict(base, depth=1))
    deep = client.post("/api/dasha/current", json=dict(base, depth=3))
    assert len(shallow.json()["current"]["periods"]) == 1
    assert len(deep.json()["current"]["periods"]) == 3
