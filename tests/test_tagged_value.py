"""
Ledger Engine - Tagged Metadata Tests

Entry and expense metadata is stored as kind-tagged values.
"""

import pytest
from decimal import Decimal

from ledger_engine.utils.tagged_value import (
    BoolValue,
    MapValue,
    NumberValue,
    StringValue,
    dump_tagged,
    from_python,
    load_tagged,
    to_python,
)


class TestFromPython:
    """Test building tagged values from plain data."""

    def test_bool_is_not_a_number(self):
        assert isinstance(from_python(True), BoolValue)

    def test_scalars(self):
        assert from_python("abc") == StringValue(value="abc")
        assert from_python(3) == NumberValue(value=Decimal("3"))
        assert from_python(0.1).value == Decimal("0.1")

    def test_nested_map(self):
        value = from_python({"fiscal_year": 2025, "source": {"batch": "A"}})
        assert isinstance(value, MapValue)
        assert isinstance(value.value["source"], MapValue)
        assert to_python(value) == {"fiscal_year": Decimal("2025"), "source": {"batch": "A"}}

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            from_python([1, 2, 3])


class TestSerialization:
    """Test the JSON form written to the database."""

    def test_decimals_dump_as_strings(self):
        data = dump_tagged(from_python({"rate": Decimal("155.25")}))
        assert data == {"kind": "map", "value": {"rate": {"kind": "number", "value": "155.25"}}}

    def test_load_restores_kinds(self):
        data = {"kind": "map", "value": {"posted": {"kind": "bool", "value": True}}}
        assert to_python(load_tagged(data)) == {"posted": True}
