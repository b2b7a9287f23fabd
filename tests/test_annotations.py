import json

from Model.annotations import polygons_to_payload, round_half_up, serialize_polygons


def test_round_half_up_matches_browser_rounding():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(-2.5) == -2
    assert round_half_up(10.49) == 10
    assert round_half_up(99.999) == 100


def test_serialize_square_is_compact():
    square = [(10, 10), (100, 10), (100, 100), (10, 100)]
    assert serialize_polygons([square]) == "[[[10,10],[100,10],[100,100],[10,100]]]"


def test_serialize_rounds_float_coordinates():
    poly = [(10.4, 10.5), (99.6, 0.2), (50.0, 49.5)]
    assert polygons_to_payload([poly]) == [[[10, 11], [100, 0], [50, 50]]]


def test_serialize_multiple_polygons_in_order():
    a = [(0, 0), (1, 0), (1, 1)]
    b = [(5, 5), (6, 5), (6, 6), (5, 6)]
    assert json.loads(serialize_polygons([a, b])) == [[[0, 0], [1, 0], [1, 1]], [[5, 5], [6, 5], [6, 6], [5, 6]]]


def test_serialize_empty():
    assert serialize_polygons([]) == "[]"
