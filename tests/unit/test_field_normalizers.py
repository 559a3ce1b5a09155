from __future__ import annotations

import logging

import pytest

from refdata_import.normalize.fields import (
    Normalized,
    normalize_date,
    normalize_enum_value,
    normalize_number,
    normalize_string,
    title_case_words,
)

"""Unit tests for the field normalizers."""


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, ""),
        ("", ""),
        ("  ASM-1  ", "ASM-1"),
        (42, "42"),
    ],
)
def test_normalize_string(raw, expected):
    assert normalize_string(raw) == Normalized(expected)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1,234 units", 1234),
        ("12", 12),
        ("  7 pcs", 7),
        ("2.5", 3),
        ("2.4", 2),
        ("-3", -3),
        ("1.2.3", 1),
        ("$1,000.49", 1000),
        ("-2.5", -2),
        ("9" * 400, int("9" * 400)),
        ("1" + "0" * 30 + ".5", 10**30 + 1),
    ],
)
def test_normalize_number_parses_digits(raw, expected):
    assert normalize_number(raw).value == expected


def test_normalize_number_defaults():
    assert normalize_number("").value == 0
    assert normalize_number(None).value == 0
    assert normalize_number("abc").value == 0
    assert normalize_number("abc", default=5).value == 5
    assert normalize_number("", default=-1).value == -1
    assert normalize_number("-").value == 0


def test_normalize_number_never_warns():
    assert normalize_number("garbage").warnings == ()


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("15/01/2024", "2024-01-15"),
        ("5-1-2024", "2024-01-05"),
        ("2024-01-15", "2024-01-15"),
        ("2024/1/5", "2024-01-05"),
        ("5/1/24", "2024-01-05"),
        ("31-12-99", "2099-12-31"),
        ("  15/01/2024 ", "2024-01-15"),
    ],
)
def test_normalize_date_patterns(raw, expected):
    result = normalize_date(raw)
    assert result.value == expected
    assert result.warnings == ()


def test_normalize_date_empty():
    assert normalize_date("") == Normalized("")
    assert normalize_date(None) == Normalized("")


@pytest.mark.parametrize("raw", ["45678", "45678.5"])
def test_normalize_date_rejects_serial_numbers(raw):
    result = normalize_date(raw)
    assert result.value == ""
    assert len(result.warnings) == 1
    assert raw in result.warnings[0]


def test_normalize_date_unrecognized_kept_and_logged(caplog):
    caplog.set_level(logging.WARNING, logger="refdata_import")
    result = normalize_date("Jan 15th")
    assert result.value == "Jan 15th"
    # logged only, never surfaced to the caller
    assert result.warnings == ()
    assert "Date format not recognized" in caplog.text


@pytest.mark.parametrize(
    "raw, enum_type, expected",
    [
        ("y", "auto", "Yes"),
        ("N", "auto", "No"),
        ("1", "auto", "Yes"),
        ("false", "auto", "No"),
        ("factory disassembly", "status", "Factory Disassembly"),
        ("IN PROGRESS", "status", "In Progress"),
        ("main", "assemblyType", "Main Assembly"),
        ("sub", "assemblyType", "Sub Assembly"),
        ("weird value", "status", "Weird Value"),
        ("maybe", "auto", "Maybe"),
        ("some thing", "unknownType", "Some Thing"),
    ],
)
def test_normalize_enum_value(raw, enum_type, expected):
    assert normalize_enum_value(raw, enum_type).value == expected


def test_normalize_enum_value_empty():
    assert normalize_enum_value("", "status").value == ""
    assert normalize_enum_value(None, "auto").value == ""


def test_title_case_words():
    assert title_case_words("aSSEMBLY   number") == "Assembly Number"
    assert title_case_words("") == ""


def test_normalize_number_ignores_non_ascii_digits():
    assert normalize_number("٤٢").value == 0
    assert normalize_number("٤2").value == 2


def test_normalize_date_only_matches_ascii_digits(caplog):
    caplog.set_level(logging.WARNING, logger="refdata_import")
    arabic_indic = "١٥/٠١/٢٠٢٤"
    result = normalize_date(arabic_indic)
    assert result.value == arabic_indic
    assert result.warnings == ()
    assert "Date format not recognized" in caplog.text
