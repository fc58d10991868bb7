"""Tests for key normalisation."""

import pytest

from dynstruct import InvalidFieldName, to_exported_name


@pytest.mark.parametrize(
    "key, expected",
    [
        ("a_b", "AB"),
        ("n", "N"),
        ("string_field", "StringField"),
        ("float32_field", "Float32Field"),
        ("user-id", "UserId"),
        ("already.dotted.key", "AlreadyDottedKey"),
        ("two  words", "TwoWords"),
        ("__private__", "Private"),
        ("camelCase", "CamelCase"),
        ("Exported", "Exported"),
        ("nonempty", "Nonempty"),
        ("none", "None_"),
        ("true", "True_"),
        ("false", "False_"),
    ],
)
def test_to_exported_name(key, expected):
    assert to_exported_name(key) == expected


@pytest.mark.parametrize("key", ["", "___", "-", "1st", "9_lives", "a$b"])
def test_rejects_unrepresentable_keys(key):
    with pytest.raises(InvalidFieldName):
        to_exported_name(key)
