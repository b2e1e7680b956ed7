from app.domain.odata_filter import (
    encode_query,
    format_coordinate,
    format_list_price,
    normalize_filter,
    normalize_query,
    split_resource,
)


def test_coordinate_and_price_literals_are_canonicalized():
    out = normalize_filter("Longitude eq -76.66891234 and ListPrice ge 450000.7")
    assert "Longitude eq -76.668912" in out
    assert "ListPrice ge 450001" in out


def test_latitude_keeps_operator_and_field_case():
    out = normalize_filter("latitude GT 39.2904001234 and LATITUDE le 39.3")
    assert out == "latitude GT 39.2904 and LATITUDE le 39.3"


def test_coordinate_formatting():
    assert format_coordinate("-76.668912340") == "-76.668912"
    assert format_coordinate("40.5") == "40.5"
    assert format_coordinate("40") == "40"
    assert format_coordinate("-0.0000001") == "0"


def test_list_price_rounds_half_up():
    assert format_list_price("2.5") == "3"
    assert format_list_price("450000.4") == "450000"
    assert format_list_price("450000") == "450000"


def test_filter_without_target_fields_is_unchanged():
    flt = "City eq 'Baltimore' and StandardStatus eq 'Active'"
    assert normalize_filter(flt) == flt


def test_unparseable_literal_fails_open():
    flt = "ListPrice eq . and City eq 'X'"
    assert normalize_filter(flt) == flt


def test_normalize_query_touches_only_filter_and_keeps_order():
    _, query = split_resource("Property?$top=5&$filter=ListPrice le 99.5&$select=ListingKey,ListPrice&empty=")
    pairs = normalize_query(query)
    assert pairs == [
        ("$top", "5"),
        ("$filter", "ListPrice le 100"),
        ("$select", "ListingKey,ListPrice"),
        ("empty", ""),
    ]


def test_filter_key_match_is_case_insensitive():
    pairs = normalize_query("$FILTER=Longitude lt -76.12345671")
    assert pairs == [("$FILTER", "Longitude lt -76.123457")]


def test_split_resource_without_query():
    assert split_resource("Property") == ("Property", "")
    assert encode_query([]) == ""
