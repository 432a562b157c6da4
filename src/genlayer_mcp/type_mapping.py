"""Abstract field types → GenLayer storage types, and their zero values."""

from __future__ import annotations

TYPE_MAP: dict[str, str] = {
    "string": "str",
    "text": "str",
    "integer": "u256",
    "int": "u256",
    "number": "u256",
    "timestamp": "u256",
    "float": "f64",
    "decimal": "f64",
    "boolean": "bool",
    "bool": "bool",
    "address": "Address",
    "list": "DynArray[str]",
    "array": "DynArray[str]",
    "dict": "TreeMap[str, str]",
    "dictionary": "TreeMap[str, str]",
    "map": "TreeMap[str, str]",
    "bytes": "bytes",
}

ZERO_ADDRESS = "0x" + "0" * 40

DEFAULT_VALUES: dict[str, str] = {
    "str": '""',
    "u256": "u256(0)",
    "f64": "0.0",
    "bool": "False",
    "Address": f"Address('{ZERO_ADDRESS}')",
    "bytes": "b''",
}


def map_type(abstract_type: str) -> str:
    """Map an abstract type tag to a GenLayer type.

    Lookup is case-insensitive. Unknown tags come back unchanged so callers
    can pass concrete GenLayer types straight through.
    """
    return TYPE_MAP.get(abstract_type.lower(), abstract_type)


def default_value_for(concrete_type: str) -> str:
    """Literal expression for the zero value of a GenLayer type."""
    # Collections are built with their zero-arg constructor
    if concrete_type.startswith("DynArray") or concrete_type.startswith("TreeMap"):
        return f"{concrete_type}()"
    return DEFAULT_VALUES.get(concrete_type, f"{concrete_type}()")
