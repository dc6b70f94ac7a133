# tests/unit/parsing/test_unit_parser.py — v1
"""Tests for parsing/parser.py — rich and legacy answer parsing."""

from __future__ import annotations

from m2md.parsing.parser import (
    LegacyResponse,
    RichResponse,
    is_rich_format,
    parse_response,
)


class TestFormatDetection:
    def test_rich_needs_type_and_subject(self):
        assert is_rich_format("TYPE: photo\nSUBJECT: x")
        assert not is_rich_format("TYPE: photo\nDESCRIPTION: x")

    def test_labels_must_start_a_line(self):
        assert not is_rich_format("the TYPE: photo and SUBJECT: x")


class TestRichParsing:
    def test_all_fields(self, rich_response):
        parsed = parse_response(rich_response)
        assert isinstance(parsed, RichResponse)
        assert parsed.format == "rich"
        assert parsed.type == "screenshot"
        assert parsed.category == "ui-design"
        assert parsed.style == "minimalist, flat"
        assert parsed.medium == "screen-capture"
        assert parsed.subject == "Settings page of a note-taking app"
        assert parsed.palette == "warm-white, slate-gray, electric-blue"
        assert parsed.colors == parsed.palette
        assert parsed.description.startswith("- Two-column layout")
        assert "**Label:** Dark mode" in parsed.extracted_text

    def test_type_lowercased_and_defaulted(self):
        assert parse_response("TYPE: Photo\nSUBJECT: x").type == "photo"
        assert parse_response("TYPE:\nSUBJECT: x").type == "other"

    def test_unknown_type_kept(self):
        assert parse_response("TYPE: hologram\nSUBJECT: x").type == "hologram"

    def test_none_means_empty(self):
        text = "TYPE: photo\nSUBJECT: None\nSTYLE: none\nEXTRACTED_TEXT: NONE\nDESCRIPTION: none"
        parsed = parse_response(text)
        assert parsed.subject == ""
        assert parsed.style == ""
        assert parsed.extracted_text == ""
        assert parsed.description == "none"

    def test_subject_single_line_and_truncated(self):
        long = "word " * 40
        parsed = parse_response(f"TYPE: photo\nSUBJECT: {long}\nDESCRIPTION: d")
        assert "\n" not in parsed.subject
        assert len(parsed.subject) == 80

    def test_colors_used_when_palette_missing(self):
        parsed = parse_response("TYPE: photo\nSUBJECT: s\nCOLORS: red, blue")
        assert parsed.palette == ""
        assert parsed.colors == "red, blue"

    def test_non_canonical_label_stays_in_body(self):
        text = "TYPE: document\nSUBJECT: memo\nDESCRIPTION:\n- header\nNote: keep this\n- footer"
        parsed = parse_response(text)
        assert "Note: keep this" in parsed.description
        assert parsed.description.endswith("- footer")

    def test_first_occurrence_wins(self):
        text = "TYPE: photo\nSUBJECT: first\nSUBJECT: second"
        assert parse_response(text).subject == "first"


class TestLegacyParsing:
    def test_sections(self, legacy_response):
        parsed = parse_response(legacy_response)
        assert isinstance(parsed, LegacyResponse)
        assert parsed.format == "legacy"
        assert parsed.type == "other"
        assert parsed.description == "- A bar chart with five bars"
        assert parsed.extracted_text == "Q1 Q2 Q3 Q4 Q5"

    def test_unlabelled_text_becomes_description(self):
        parsed = parse_response("  Just a plain answer.\n")
        assert parsed.description == "Just a plain answer."
        assert parsed.extracted_text == ""

    def test_extracted_text_none(self):
        parsed = parse_response("DESCRIPTION: d\nEXTRACTED_TEXT: None")
        assert parsed.extracted_text == ""

    def test_fields_excludes_format(self, legacy_response):
        fields = parse_response(legacy_response).fields()
        assert "format" not in fields
        assert set(fields) >= {"type", "description", "extracted_text", "tags"}


class TestContractExamples:
    def test_empty_input(self):
        parsed = parse_response("")
        assert parsed.type == "other"
        assert parsed.description == ""
        assert all(v == "" for k, v in parsed.fields().items() if k != "type")

    def test_labels_on_their_own_lines(self):
        parsed = parse_response(
            "TYPE:\nphoto\n\nSUBJECT:\nA cat\n\nDESCRIPTION:\nA cat on a mat.\n\nEXTRACTED_TEXT:\nNone"
        )
        assert parsed.type == "photo"
        assert parsed.subject == "A cat"
        assert parsed.description == "A cat on a mat."
        assert parsed.extracted_text == ""
