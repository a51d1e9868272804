from lakay_alert.models import Coordinates
from lakay_alert.processors import distance_km, rank

from conftest import make_incident

ORIGIN = Coordinates(18.5, -72.3)


def _ids(incidents):
    return [i.id for i in incidents]


def test_no_reference_returns_input_unchanged():
    incidents = [make_incident("b", 19.0, -72.0), make_incident("a", 18.5, -72.3)]
    assert rank(incidents, None) is incidents


def test_empty_input():
    incidents = []
    assert rank(incidents, ORIGIN) is incidents


def test_nearest_first():
    incidents = [
        make_incident("far", 19.7, -72.2),
        make_incident("near", 18.51, -72.3),
        make_incident("mid", 18.9, -72.3),
    ]
    ranked = rank(incidents, ORIGIN)
    assert _ids(ranked) == ["near", "mid", "far"]

    distances = [distance_km(ORIGIN.lat, ORIGIN.lng, i.location.lat, i.location.lng) for i in ranked]
    assert distances == sorted(distances)


def test_ties_keep_input_order():
    incidents = [make_incident(name, 18.6, -72.3) for name in ("x", "y", "z")]
    assert _ids(rank(incidents, ORIGIN)) == ["x", "y", "z"]


def test_does_not_mutate_input():
    incidents = [make_incident("far", 19.7, -72.2), make_incident("near", 18.51, -72.3)]
    original = list(incidents)
    rank(incidents, ORIGIN)
    assert incidents == original


def test_unlocated_keeps_position_at_end():
    # A is at the reference, B about 5 km away, C has no location
    a = make_incident("A", 18.5, -72.3)
    b = make_incident("B", 18.545, -72.3)
    c = make_incident("C")
    assert _ids(rank([a, b, c], ORIGIN)) == ["A", "B", "C"]


def test_unlocated_keeps_position_in_middle():
    a = make_incident("A", 18.5, -72.3)
    b = make_incident("B", 18.545, -72.3)
    c = make_incident("C")
    assert _ids(rank([a, c, b], ORIGIN)) == ["A", "C", "B"]
    assert _ids(rank([b, c, a], ORIGIN)) == ["A", "C", "B"]


def test_unlocated_relative_order_preserved():
    incidents = [
        make_incident("u1"),
        make_incident("far", 19.7, -72.2),
        make_incident("u2"),
        make_incident("near", 18.51, -72.3),
        make_incident("u3"),
    ]
    ranked = rank(incidents, ORIGIN)
    assert _ids(ranked) == ["u1", "near", "u2", "far", "u3"]


def test_non_finite_location_treated_as_unlocated():
    incidents = [
        make_incident("far", 19.7, -72.2),
        make_incident("broken", float("nan"), -72.3),
        make_incident("near", 18.51, -72.3),
    ]
    assert _ids(rank(incidents, ORIGIN)) == ["near", "broken", "far"]
