import math

from app.domain.comparables import (
    classify_comparables,
    looks_renovated,
    planar_distance,
    values_from_comparables,
)


def _comp(key, price, lat=39.30, lng=-76.60, remarks="", condition=""):
    return {
        "ListingKey": key,
        "ListPrice": price,
        "Latitude": lat,
        "Longitude": lng,
        "PublicRemarks": remarks,
        "PropertyCondition": condition,
    }


def test_renovation_signals():
    assert looks_renovated(_comp("a", 200_000, remarks="Fully RENOVATED rowhome"), 200_000)
    assert looks_renovated(_comp("b", 200_000, condition="Very Good"), 200_000)
    assert looks_renovated(_comp("c", 250_000), 200_000)  # > 1.2x subject
    assert not looks_renovated(_comp("d", 240_000, remarks="Needs work"), 200_000)
    assert not looks_renovated(_comp("e", 500_000), None)


def test_missing_coordinates_sort_last():
    assert planar_distance({"Latitude": None, "Longitude": 1}, 0, 0) == math.inf


def test_classify_keeps_three_closest_per_group():
    subject = (39.30, -76.60)
    rows = [_comp(f"r{i}", 300_000, lat=39.30 + i * 0.01, remarks="updated kitchen") for i in range(5)]
    rows += [_comp(f"a{i}", 190_000, lat=39.30 - i * 0.01, remarks="as is") for i in range(4, 0, -1)]

    split = classify_comparables(rows, subject_price=200_000, lat=subject[0], lng=subject[1])

    assert [c["ListingKey"] for c in split.renovated] == ["r0", "r1", "r2"]
    assert [c["ListingKey"] for c in split.as_is] == ["a1", "a2", "a3"]


def test_values_from_comparables():
    split = classify_comparables(
        [_comp("r", 300_000, remarks="stunning"), _comp("r2", 301_000, remarks="modern"), _comp("a", 150_000)],
        subject_price=200_000,
        lat=39.3,
        lng=-76.6,
    )
    arv, chv = values_from_comparables(split)
    assert arv == 300_500
    assert chv == 150_000


def test_empty_split():
    split = classify_comparables([], subject_price=100_000, lat=0, lng=0)
    assert split.empty
    assert values_from_comparables(split) == (0, 0)
