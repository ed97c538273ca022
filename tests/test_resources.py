"""
Unit Tests for Reference Resources

Tests for URI parsing, filtering and the resource catalog.
"""
import pytest

from md_mcp_server.resources import (
    NAMESPACE,
    RESOURCES,
    ResourceCatalog,
    build_resource_catalog,
    parse_resource_uri,
)

LAB_URI = f"{NAMESPACE}/lab-reference-ranges"
VITALS_URI = f"{NAMESPACE}/vital-signs-norms"
RULES_URI = f"{NAMESPACE}/clinical-decision-rules"


@pytest.fixture
def catalog(reference) -> ResourceCatalog:
    return build_resource_catalog(reference)


class TestParseResourceUri:
    """Tests for base URI and filter extraction."""

    def test_filters_are_lowercased_and_stripped(self):
        base, filters = parse_resource_uri(f"{LAB_URI}/?category=%20CBC%20&gender=Male")
        assert base == LAB_URI
        assert filters == {"category": "cbc", "gender": "male"}

    def test_last_value_wins(self):
        _, filters = parse_resource_uri(f"{LAB_URI}?query=sodium&query=potassium")
        assert filters == {"query": "potassium"}


class TestResourceCatalog:
    """Tests for listing and reading resources."""

    def test_lists_three_text_resources(self, catalog):
        listed = catalog.list_resources()

        assert [str(resource.uri) for resource in listed] == [LAB_URI, VITALS_URI, RULES_URI]
        assert all(resource.mimeType == "text/plain" for resource in listed)
        assert len(catalog) == 3

    def test_duplicate_resource_rejected(self, catalog):
        with pytest.raises(ValueError):
            catalog.add_resource(RESOURCES[0])

    def test_unknown_uri(self, catalog):
        with pytest.raises(KeyError):
            catalog.read(f"{NAMESPACE}/drug-formulary")

    def test_unfiltered_lab_ranges(self, catalog, reference):
        rendered = catalog.read(LAB_URI)

        assert rendered.text.startswith("# Laboratory Reference Ranges Database\n\n**Hemoglobin** (CBC)")
        assert rendered.text.endswith("---")
        assert rendered.metadata["total_tests"] == len(reference.lab_ranges)
        assert rendered.metadata["filters"] == {}

    def test_gender_filter_keeps_both_rows(self, catalog):
        rendered = catalog.read(f"{LAB_URI}?gender=female")

        assert "**Gender:** Male" not in rendered.text
        assert "**Gender:** Female" in rendered.text
        assert "**Gender:** Both" in rendered.text

    def test_gender_filter_is_substring(self, catalog):
        partial = catalog.read(f"{LAB_URI}?gender=fem").metadata["total_tests"]
        full = catalog.read(f"{LAB_URI}?gender=female").metadata["total_tests"]
        assert partial == full

    @pytest.mark.parametrize(
        "uri,base_query,extra,total_key",
        [
            (LAB_URI, "category=cbc", "gender=male", "total_tests"),
            (LAB_URI, "gender=female", "age_group=adult", "total_tests"),
            (LAB_URI, "query=hemoglobin", "category=cbc", "total_tests"),
            (VITALS_URI, "age_group=adult", "vital_sign=heart", "total_vital_signs"),
            (VITALS_URI, "gender=male", "query=pressure", "total_vital_signs"),
            (RULES_URI, "category=safety", "severity=critical", "total_rules"),
            (RULES_URI, "severity=high", "evidence_level=a", "total_rules"),
        ],
    )
    def test_extra_filter_never_adds_rows(self, catalog, uri, base_query, extra, total_key):
        base = catalog.read(f"{uri}?{base_query}").metadata[total_key]
        narrowed = catalog.read(f"{uri}?{base_query}&{extra}").metadata[total_key]
        assert narrowed <= base

    def test_filters_narrow_results(self, catalog):
        everything = catalog.read(LAB_URI).metadata["total_tests"]
        cbc = catalog.read(f"{LAB_URI}?category=cbc").metadata
        adult_cbc_male = catalog.read(f"{LAB_URI}?category=cbc&gender=male&age_group=adult").metadata

        assert cbc["categories"] == ["CBC"]
        assert everything > cbc["total_tests"] >= adult_cbc_male["total_tests"]

    def test_unknown_and_empty_filters_ignored(self, catalog):
        rendered = catalog.read(f"{VITALS_URI}?colour=blue&age_group=")
        assert rendered.metadata["filters"] == {}
        assert rendered.metadata["total_vital_signs"] == catalog.read(VITALS_URI).metadata["total_vital_signs"]

    def test_vital_sign_query(self, catalog):
        rendered = catalog.read(f"{VITALS_URI}?vital_sign=heart%20rate")

        assert rendered.text.startswith("# Vital Signs Normal Ranges Database")
        assert rendered.metadata["total_vital_signs"] == 5
        assert rendered.metadata["age_groups"] == ["Newborn", "Infant", "Child", "Adult", "Elderly"]

    def test_rules_by_severity(self, catalog):
        rendered = catalog.read(f"{RULES_URI}?severity=critical&category=safety")

        assert "**Rule ID:** SAFETY_001" in rendered.text
        assert rendered.metadata["categories"] == ["Safety"]

    def test_no_match_renders_header_only(self, catalog):
        rendered = catalog.read(f"{RULES_URI}?query=zzzz")

        assert rendered.text == "# Clinical Decision Support Rules Database\n\n"
        assert rendered.metadata["total_rules"] == 0
