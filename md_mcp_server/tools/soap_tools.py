from __future__ import annotations

from functools import partial

from ..clinical import soap
from ..models.soap import (
    CompileSoapNoteInput,
    DocumentAssessmentInput,
    DocumentObjectiveInput,
    DocumentPlanInput,
    DocumentSubjectiveInput,
)
from ..reference import ReferenceData
from . import ToolRegistry
from .pipeline import tool_handler, tool_spec

_SOAP_TOOLS = (
    (
        "document_subjective",
        "Document Subjective",
        "Documents the subjective section of a SOAP note: chief complaint, OPQRST history, review of "
        "systems, medication compliance and functional status. Returns a narrative, a completeness "
        "score with missing elements, and red flags.",
        DocumentSubjectiveInput,
        soap.document_subjective,
    ),
    (
        "document_objective",
        "Document Objective",
        "Documents the objective section: vital signs, physical examination, laboratory, imaging and "
        "other diagnostics. Flags abnormal findings and critical values, and trends vitals against "
        "previous_vital_signs when supplied.",
        DocumentObjectiveInput,
        soap.document_objective,
    ),
    (
        "document_assessment",
        "Document Assessment",
        "Documents the assessment section: clinical summary, working and differential diagnoses, "
        "prioritized problem list, risk stratification and prognosis.",
        DocumentAssessmentInput,
        soap.document_assessment,
    ),
    (
        "document_plan",
        "Document Plan",
        "Documents the plan section: treatment, diagnostics, monitoring, education and disposition. "
        "Derives orders, prescriptions, referrals, patient instructions and the follow-up date.",
        DocumentPlanInput,
        soap.document_plan,
    ),
    (
        "compile_soap_note",
        "Compile SOAP Note",
        "Compiles a complete SOAP note from the four section narratives (placeholders where a "
        "narrative is not supplied), with quality checks and ICD-10/CPT coding suggestions.",
        CompileSoapNoteInput,
        soap.compile_soap_note,
    ),
)


def register_tools(registry: ToolRegistry, reference: ReferenceData) -> None:
    for name, title, description, schema, evaluate in _SOAP_TOOLS:
        registry.add_tool(
            tool_spec(name, title, description, schema),
            tool_handler(name, schema, partial(evaluate, reference=reference)),
        )
