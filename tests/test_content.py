"""Tests for slug and record helpers."""

import pytest

from jsonsite.content import NO_IDENTITY, record_identity, record_label, record_title, slugify

SLUG_SAMPLES = [
    "Some Term!",
    "  Multi   Space  ",
    "---x---",
    "Visual Novel / Otome",
    "C++ & C#",
    "snake_case_tag",
    "Café au lait",
    "tab\tand\nnewline",
    "a - - b",
    "!!!",
    "-",
    "Ünïcödé",
    "already-a-slug",
    42,
    3.5,
]


class TestSlugify:

    def test_punctuation_removed(self):
        assert slugify("Some Term!") == "some-term"

    def test_whitespace_runs_collapse(self):
        assert slugify("  Multi   Space  ") == "multi-space"

    def test_edge_dashes_trimmed(self):
        assert slugify("---x---") == "x"

    def test_empty_and_none(self):
        assert slugify("") == ""
        assert slugify(None) == ""

    def test_punctuation_only_is_empty(self):
        assert slugify("!!!") == ""
        assert slugify("   ") == ""

    def test_underscore_kept(self):
        assert slugify("snake_case_tag") == "snake_case_tag"

    def test_non_ascii_letters_dropped(self):
        assert slugify("Café au lait") == "caf-au-lait"

    def test_numbers_converted(self):
        assert slugify(42) == "42"
        assert slugify(3.5) == "35"

    def test_zero_is_falsy(self):
        assert slugify(0) == ""

    @pytest.mark.parametrize("text", SLUG_SAMPLES)
    def test_idempotent(self, text):
        once = slugify(text)
        assert slugify(once) == once

    @pytest.mark.parametrize("text", SLUG_SAMPLES)
    def test_only_safe_characters(self, text):
        slug = slugify(text)
        assert all(ch.isascii() and (ch.isalnum() or ch in "-_") for ch in slug)
        assert "--" not in slug
        assert not slug.startswith("-") and not slug.endswith("-")


class TestRecordHelpers:

    def test_identity_from_id(self):
        assert record_identity({"id": 7}) == 7

    def test_zero_is_a_valid_identity(self):
        assert record_identity({"id": 0}) == 0

    def test_missing_or_null_id(self):
        assert record_identity({}) is NO_IDENTITY
        assert record_identity({"id": None}) is NO_IDENTITY

    def test_label_prefers_identity(self):
        assert record_label({"id": 3}, 9) == "id=3"
        assert record_label({}, 9) == "#9"

    def test_title_fallbacks(self):
        assert record_title({"title": " Game "}) == "Game"
        assert record_title({"name": "Named"}) == "Named"
        assert record_title({"label": "X"}, title_field="label") == "X"
        assert record_title({"id": 5}) == "5"
        assert record_title({}) == "Untitled"
