"""
Tests for PO folder-name parsing
"""
import pytest

from po_tracker.domain.folder_name import (
    ParsedFolderName, parse_folder_name, parse_it_ref_no,
    CAPEX, OPEX, IT_REF_UNKNOWN, UNTITLED,
)


def test_conventional_name():
    assert parse_folder_name("2026-01-IT-045_Capex_New_Laptop") == ParsedFolderName(
        capex_opex="CAPEX", it_ref_no="IT-045", title="New Laptop",
    )


def test_opex_name():
    parsed = parse_folder_name("2026-02-IT-7_opex_Cloud Subscription")
    assert parsed.capex_opex == OPEX
    assert parsed.it_ref_no == "IT-7"
    assert parsed.title == "Cloud Subscription"


def test_no_markers_uses_words_after_first():
    parsed = parse_folder_name("random text no markers")
    assert parsed.capex_opex == CAPEX
    assert parsed.it_ref_no == IT_REF_UNKNOWN
    assert parsed.title == "text no markers"


@pytest.mark.parametrize("raw", ["", "   ", None, "___"])
def test_empty_input_defaults(raw):
    parsed = parse_folder_name(raw)
    assert parsed == ParsedFolderName(capex_opex=CAPEX, it_ref_no=IT_REF_UNKNOWN, title=UNTITLED)


def test_last_capex_opex_token_wins():
    parsed = parse_folder_name("IT-1_Capex_Opex_Printer")
    assert parsed.capex_opex == OPEX
    # title follows the FIRST marker token
    assert parsed.title == "Opex Printer"


def test_tokens_are_trimmed_and_empty_tokens_dropped():
    parsed = parse_folder_name("  2026-03-IT-010 __ OPEX _ Office  Chairs ")
    assert parsed.capex_opex == OPEX
    assert parsed.it_ref_no == "IT-010"
    assert parsed.title == "Office  Chairs"


def test_marker_without_following_tokens_falls_back_to_tokens_after_first():
    parsed = parse_folder_name("2026-01-IT-001_Capex")
    assert parsed.capex_opex == CAPEX
    assert parsed.title == "Capex"


def test_without_marker_joins_tokens_after_first():
    parsed = parse_folder_name("2026-01-IT-002_Docking_Station")
    assert parsed.title == "Docking Station"


def test_single_word_falls_back_to_raw():
    assert parse_folder_name("Laptop").title == "Laptop"


def test_it_ref_is_case_insensitive_and_uppercased():
    assert parse_it_ref_no("2026-01-it-099_capex_x") == "IT-099"


def test_it_ref_first_match_wins():
    assert parse_it_ref_no("IT-1 then IT-2") == "IT-1"


def test_it_ref_requires_digits():
    assert parse_it_ref_no("IT-ABC_Capex_Thing") == IT_REF_UNKNOWN
