"""Tests for abstract type mapping and default values."""

from __future__ import annotations

import pytest

from genlayer_mcp.type_mapping import TYPE_MAP, ZERO_ADDRESS, default_value_for, map_type


class TestMapType:
    @pytest.mark.parametrize("abstract,concrete", [
        ("string", "str"),
        ("integer", "u256"),
        ("float", "f64"),
        ("boolean", "bool"),
        ("address", "Address"),
        ("list", "DynArray[str]"),
        ("dict", "TreeMap[str, str]"),
        ("bytes", "bytes"),
    ])
    def test_known_tags(self, abstract, concrete):
        assert map_type(abstract) == concrete

    def test_case_insensitive(self):
        assert map_type("String") == "str"
        assert map_type("INTEGER") == "u256"

    def test_unknown_tag_passes_through(self):
        assert map_type("u64") == "u64"
        assert map_type("DynArray[Address]") == "DynArray[Address]"

    def test_every_mapped_type_has_a_default(self):
        for concrete in set(TYPE_MAP.values()):
            value = default_value_for(concrete)
            assert value
            compile(value, "<default>", "eval")


class TestDefaultValueFor:
    def test_primitives(self):
        assert default_value_for("str") == '""'
        assert default_value_for("u256") == "u256(0)"
        assert default_value_for("bool") == "False"
        assert default_value_for("f64") == "0.0"
        assert default_value_for("bytes") == "b''"

    def test_address_is_zero_address(self):
        assert default_value_for("Address") == f"Address('{ZERO_ADDRESS}')"
        assert ZERO_ADDRESS == "0x" + "0" * 40

    def test_collections_use_constructor(self):
        assert default_value_for("DynArray[str]") == "DynArray[str]()"
        assert default_value_for("TreeMap[str, str]") == "TreeMap[str, str]()"

    def test_unknown_type_uses_constructor(self):
        assert default_value_for("u64") == "u64()"
