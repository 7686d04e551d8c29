"""Tests for DynamoDB storage helpers."""

import json
from decimal import Decimal

import pytest

from utils.dynamodb_utils import (
    decimal_to_python,
    decode_gear_blob,
    parse_from_dynamodb,
    parse_items_from_dynamodb,
    prepare_for_dynamodb,
    python_to_decimal,
)


class TestDecimalConversion:
    """Tests for Decimal <-> Python number conversion."""

    def test_whole_decimal_becomes_int(self):
        result = decimal_to_python(Decimal("14411"))
        assert result == 14411
        assert isinstance(result, int)

    def test_fractional_decimal_becomes_float(self):
        result = decimal_to_python(Decimal("0.25"))
        assert result == 0.25
        assert isinstance(result, float)

    def test_nested(self):
        item = {
            "elevation": Decimal("8000"),
            "required_gear": [{"estimated_weight_kg": Decimal("0.5"), "quantity": Decimal("2")}],
        }
        assert decimal_to_python(item) == {
            "elevation": 8000,
            "required_gear": [{"estimated_weight_kg": 0.5, "quantity": 2}],
        }

    def test_float_to_decimal_uses_short_repr(self):
        assert python_to_decimal(0.1) == Decimal("0.1")
        assert python_to_decimal(1 / 3) == Decimal("0.333333")

    def test_int_to_decimal(self):
        assert python_to_decimal(3) == Decimal(3)

    def test_bool_untouched(self):
        assert python_to_decimal(True) is True
        assert python_to_decimal({"packed": False}) == {"packed": False}

    def test_tuple_becomes_list(self):
        assert python_to_decimal((1, 0.5)) == [Decimal(1), Decimal("0.5")]


class TestPrepareAndParse:
    """Tests for the table boundary helpers."""

    def test_prepare_drops_top_level_none(self):
        item = prepare_for_dynamodb(
            {"climb_id": "c1", "ttl": None, "required_gear": [{"importance": None}]}
        )
        assert "ttl" not in item
        # Nested None values are stored as NULL
        assert item["required_gear"] == [{"importance": None}]

    def test_prepare_converts_numbers(self):
        item = prepare_for_dynamodb({"elevation": 14411, "base_pack_weight_kg": 1.2})
        assert item == {"elevation": Decimal(14411), "base_pack_weight_kg": Decimal("1.2")}

    def test_parse_items(self):
        items = parse_items_from_dynamodb([{"a": Decimal("1")}, {"a": Decimal("1.5")}])
        assert items == [{"a": 1}, {"a": 1.5}]

    def test_parse_leaves_strings(self):
        assert parse_from_dynamodb({"mountain_name": "Shasta"}) == {"mountain_name": "Shasta"}


class TestDecodeGearBlob:
    """Tests for decode_gear_blob."""

    def test_list_passthrough(self):
        gear = [{"item_name": "Rope"}]
        result = decode_gear_blob(gear)
        assert result == gear
        assert result is not gear

    def test_json_string(self):
        blob = json.dumps([{"item_name": "Rope", "packed": True}])
        assert decode_gear_blob(blob) == [{"item_name": "Rope", "packed": True}]

    def test_json_bytes(self):
        assert decode_gear_blob(b'[{"item_name": "Rope"}]') == [{"item_name": "Rope"}]

    @pytest.mark.parametrize("value", [None, "", "not json", '{"item_name": "Rope"}', 42, {}])
    def test_anything_else_is_empty(self, value):
        assert decode_gear_blob(value) == []
