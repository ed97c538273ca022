"""
Static reference resources.

Each resource is a filterable view over one reference table. Filters arrive
as query-string parameters on the resource URI and match case-insensitively
by substring; an empty filter keeps every row.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import parse_qs, urlsplit

from mcp import types

from .reference import ReferenceData
from .reference.clinical_rules import ClinicalRule
from .reference.lab_ranges import LabReferenceRange
from .reference.vital_signs import VitalSignRange

NAMESPACE = "mcp://md-mcp"


def _contains(value: Optional[str], needle: str) -> bool:
    return needle in (value or "").lower()


def _gender_matches(value: str, needle: str) -> bool:
    # Substring like every other filter; "male" also matches "Female".
    value = value.lower()
    return value == "both" or needle in value


def _distinct(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))


@dataclass(frozen=True)
class RenderedResource:
    uri: str
    text: str
    metadata: Dict[str, Any]


@dataclass(frozen=True)
class ResourceDefinition:
    name: str
    title: str
    description: str
    filters: Tuple[str, ...]
    render: Callable[[ReferenceData, Mapping[str, str]], Tuple[str, Dict[str, Any]]]

    @property
    def uri(self) -> str:
        return f"{NAMESPACE}/{self.name}"


def filter_lab_ranges(rows: Sequence[LabReferenceRange], filters: Mapping[str, str]) -> List[LabReferenceRange]:
    query = filters.get("query", "")
    category = filters.get("category", "")
    age_group = filters.get("age_group", "")
    gender = filters.get("gender", "")
    return [
        row
        for row in rows
        if (not query or any(_contains(text, query) for text in (row.test_name, row.category, row.notes)))
        and (not category or _contains(row.category, category))
        and (not age_group or _contains(row.age_group, age_group))
        and (not gender or _gender_matches(row.gender, gender))
    ]


def render_lab_ranges(reference: ReferenceData, filters: Mapping[str, str]) -> Tuple[str, Dict[str, Any]]:
    rows = filter_lab_ranges(reference.lab_ranges, filters)
    entries = [
        f"**{row.test_name}** ({row.category})\n"
        f"**Age Group:** {row.age_group} | **Gender:** {row.gender}\n"
        f"**Normal Range:** {row.normal_range} {row.units}\n"
        f"**Critical Values:** {row.critical_low or 'N/A'} - {row.critical_high or 'N/A'}\n"
        f"**Notes:** {row.notes or 'No additional notes'}\n"
        "---"
        for row in rows
    ]
    text = "# Laboratory Reference Ranges Database\n\n" + "\n\n".join(entries)
    return text, {"total_tests": len(rows), "categories": _distinct(row.category for row in rows)}


def filter_vital_signs(rows: Sequence[VitalSignRange], filters: Mapping[str, str]) -> List[VitalSignRange]:
    query = filters.get("query", "")
    age_group = filters.get("age_group", "")
    gender = filters.get("gender", "")
    vital_sign = filters.get("vital_sign", "")
    return [
        row
        for row in rows
        if (
            not query
            or any(_contains(text, query) for text in (row.vital_sign, row.age_group, row.notes, row.clinical_context))
        )
        and (not age_group or _contains(row.age_group, age_group))
        and (not gender or _gender_matches(row.gender, gender))
        and (not vital_sign or _contains(row.vital_sign, vital_sign))
    ]


def render_vital_signs(reference: ReferenceData, filters: Mapping[str, str]) -> Tuple[str, Dict[str, Any]]:
    rows = filter_vital_signs(reference.vital_signs, filters)
    entries = [
        f"**{row.vital_sign}** ({row.age_group} | {row.gender})\n"
        f"**Normal Range:** {row.normal_range} {row.units}\n"
        f"**Critical Values:** {row.critical_low or 'N/A'} - {row.critical_high or 'N/A'}\n"
        f"**Clinical Context:** {row.clinical_context or 'General'}\n"
        f"**Notes:** {row.notes or 'No additional notes'}\n"
        "---"
        for row in rows
    ]
    text = "# Vital Signs Normal Ranges Database\n\n" + "\n\n".join(entries)
    return text, {"total_vital_signs": len(rows), "age_groups": _distinct(row.age_group for row in rows)}


def filter_clinical_rules(rows: Sequence[ClinicalRule], filters: Mapping[str, str]) -> List[ClinicalRule]:
    query = filters.get("query", "")
    category = filters.get("category", "")
    severity = filters.get("severity", "")
    evidence_level = filters.get("evidence_level", "")
    return [
        row
        for row in rows
        if (
            not query
            or any(
                _contains(text, query)
                for text in (row.rule_name, row.trigger_condition, row.clinical_action, row.applicable_population)
            )
        )
        and (not category or _contains(row.category, category))
        and (not severity or _contains(row.severity, severity))
        and (not evidence_level or _contains(row.evidence_level, evidence_level))
    ]


def render_clinical_rules(reference: ReferenceData, filters: Mapping[str, str]) -> Tuple[str, Dict[str, Any]]:
    rows = filter_clinical_rules(reference.clinical_rules, filters)
    entries = [
        f"**{row.rule_name}** ({row.category} | {row.severity} | Evidence: {row.evidence_level})\n"
        f"**Rule ID:** {row.rule_id}\n"
        f"**Trigger Condition:** {row.trigger_condition}\n"
        f"**Clinical Action:** {row.clinical_action}\n"
        f"**Applicable Population:** {row.applicable_population}\n"
        f"**Monitoring Requirements:** {row.monitoring_requirements or 'None specified'}\n"
        f"**Documentation Requirements:** {row.documentation_requirements or 'None specified'}\n"
        f"**References:** {row.references or 'None specified'}\n"
        "---"
        for row in rows
    ]
    text = "# Clinical Decision Support Rules Database\n\n" + "\n\n".join(entries)
    return text, {"total_rules": len(rows), "categories": _distinct(row.category for row in rows)}


RESOURCES: Tuple[ResourceDefinition, ...] = (
    ResourceDefinition(
        name="lab-reference-ranges",
        title="Laboratory Reference Ranges",
        description="Laboratory reference ranges by test category, age group and gender, with critical values "
        "and interpretation notes. Filters: query, category, age_group, gender.",
        filters=("query", "category", "age_group", "gender"),
        render=render_lab_ranges,
    ),
    ResourceDefinition(
        name="vital-signs-norms",
        title="Vital Signs Normal Ranges",
        description="Normal vital-sign ranges from newborn to elderly, with critical values and clinical "
        "context. Filters: query, age_group, gender, vital_sign.",
        filters=("query", "age_group", "gender", "vital_sign"),
        render=render_vital_signs,
    ),
    ResourceDefinition(
        name="clinical-decision-rules",
        title="Clinical Decision Support Rules",
        description="Evidence-graded clinical decision rules with triggers, actions, monitoring and "
        "documentation requirements. Filters: query, category, severity, evidence_level.",
        filters=("query", "category", "severity", "evidence_level"),
        render=render_clinical_rules,
    ),
)


def parse_resource_uri(uri: str) -> Tuple[str, Dict[str, str]]:
    """Split a resource URI into its base URI and lowercased query filters."""
    parts = urlsplit(str(uri))
    base = f"{parts.scheme}://{parts.netloc}{parts.path}".rstrip("/")
    filters = {key: values[-1].strip().lower() for key, values in parse_qs(parts.query).items() if values}
    return base, filters


class ResourceCatalog:
    """
    In-memory catalog of the reference resources, keyed by base URI.
    """

    def __init__(self, reference: ReferenceData) -> None:
        self._reference = reference
        self._resources: Dict[str, ResourceDefinition] = {}

    def add_resource(self, definition: ResourceDefinition) -> None:
        if definition.uri in self._resources:
            raise ValueError(f"Resource '{definition.uri}' already registered")
        self._resources[definition.uri] = definition

    def list_resources(self) -> List[types.Resource]:
        return [
            types.Resource(
                uri=definition.uri,
                name=definition.name,
                title=definition.title,
                description=definition.description,
                mimeType="text/plain",
            )
            for definition in self._resources.values()
        ]

    def read(self, uri: str) -> RenderedResource:
        base, filters = parse_resource_uri(uri)
        if base not in self._resources:
            raise KeyError(f"Unknown resource '{base}'")
        definition = self._resources[base]
        # Unknown query parameters are ignored.
        known = {key: value for key, value in filters.items() if key in definition.filters and value}
        text, metadata = definition.render(self._reference, known)
        return RenderedResource(uri=base, text=text, metadata={**metadata, "filters": known})

    def __contains__(self, uri: object) -> bool:
        return uri in self._resources

    def __len__(self) -> int:
        return len(self._resources)


def build_resource_catalog(reference: ReferenceData) -> ResourceCatalog:
    catalog = ResourceCatalog(reference)
    for definition in RESOURCES:
        catalog.add_resource(definition)
    return catalog
