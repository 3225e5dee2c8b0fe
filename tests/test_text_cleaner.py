"""Tests for boilerplate removal."""
from app.services.text_cleaner import clean_text


def test_empty_input_returns_empty_string():
    assert clean_text("") == ""


def test_references_section_removed_to_end():
    raw = "Intro text about graphs.\n\nReferences\n[1] Smith, J. Graphs. 2020.\n[2] Doe, A. Trees."
    cleaned = clean_text(raw)
    assert cleaned == "Intro text about graphs."


def test_references_only_document_cleans_to_nothing():
    assert clean_text("References: [1] Smith et al.") == ""


def test_copyright_and_license_lines_removed():
    raw = "Body line one.\n© 2024 Example Press. All rights reserved.\nBody line two.\nLicensed under CC BY 4.0"
    cleaned = clean_text(raw)
    assert "Body line one." in cleaned
    assert "Body line two." in cleaned
    assert "rights reserved" not in cleaned
    assert "Licensed" not in cleaned


def test_acknowledgments_and_keyword_metadata_removed():
    raw = (
        "Keywords: graphs, trees\n"
        "We study graphs.\n"
        "Acknowledgments: we thank the reviewers.\n"
        "This work was funded by a national grant."
    )
    cleaned = clean_text(raw)
    assert cleaned == "We study graphs."


def test_page_numbers_and_page_headers_removed():
    raw = "First paragraph.\n12\nPage 3 of 10\n[Page 4]\nSecond paragraph."
    cleaned = clean_text(raw)
    assert cleaned == "First paragraph.\n\nSecond paragraph."


def test_whitespace_normalised():
    raw = "   Line one.   \n\n\n\n\n   Line two.  \r\n"
    assert clean_text(raw) == "Line one.\n\nLine two."


def test_disclaimer_lines_removed():
    raw = "Useful content.\nDisclaimer: the views expressed are the authors' own."
    assert clean_text(raw) == "Useful content."
