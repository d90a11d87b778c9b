"""Tests for dcmsummary/catalog.py."""

import pytest

from dcmsummary.catalog import (
    DERIVED_KEYS,
    PAT_MODE_TAG,
    SLICE_TIMES_TAG,
    SUMMARY_TEMPLATE,
    TAG_CATALOG,
    TagDefinition,
    format_tag,
    header_tags,
    name_for_code,
    tag_from_code,
    validate_catalog,
)


class TestTagCodes:
    @pytest.mark.parametrize("code", ["0018,0080", "(0018,0080)", "00180080"])
    def test_accepted_forms(self, code):
        tag = tag_from_code(code)
        assert (tag.group, tag.element) == (0x0018, 0x0080)

    def test_invalid_code_raises(self):
        with pytest.raises(ValueError):
            tag_from_code("RepetitionTime")

    def test_format_lower_case(self):
        assert format_tag(tag_from_code("0019,10AB")) == "0019,10ab"


class TestCatalog:
    def test_catalog_is_valid(self):
        validate_catalog(TAG_CATALOG)

    def test_duplicate_code_rejected(self):
        with pytest.raises(ValueError, match="code"):
            validate_catalog([TagDefinition("0018,0080", "A"), TagDefinition("(0018,0080)", "B")])

    def test_duplicate_name_rejected(self):
        with pytest.raises(ValueError, match="name"):
            validate_catalog([TagDefinition("0018,0080", "A"), TagDefinition("0018,0081", "A")])

    def test_private_tags(self):
        assert SLICE_TIMES_TAG.is_private
        assert PAT_MODE_TAG.is_private
        assert not TagDefinition("0018,0080", "RepetitionTime").is_private

    def test_header_tags_exclude_private(self):
        names = [entry.name for entry in header_tags()]
        assert "RepetitionTime" in names
        assert SLICE_TIMES_TAG.name not in names
        assert PAT_MODE_TAG.name not in names

    def test_name_for_code(self):
        assert name_for_code("(0018,0081)") == "EchoTime"
        assert name_for_code("0010,0010") is None

    def test_derived_keys_do_not_clash_with_catalog(self):
        names = {entry.name for entry in TAG_CATALOG}
        assert not names & set(DERIVED_KEYS)

    def test_template_uses_every_derived_key(self):
        for key in DERIVED_KEYS:
            assert key in SUMMARY_TEMPLATE
