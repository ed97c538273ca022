"""
SOAP note documentation.

Each section tool turns structured findings into a narrative plus the
structured data it came from, and flags what a reviewer should look at
(missing elements, red flags, abnormal or critical values, risk). The
compiler assembles whatever section narratives the caller passes back.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from ..models.soap import (
    CompileSoapNoteInput,
    DocumentAssessmentInput,
    DocumentObjectiveInput,
    DocumentPlanInput,
    DocumentSubjectiveInput,
)
from ..reference import ReferenceData
from ..reference.soap import FUNCTIONAL_DECLINE_WORDS, REVIEW_OF_SYSTEMS, VITAL_TREND_BANDS
from .common import format_number, iso, new_id, utc_now

HIGH_SEVERITY_SCORE = 8
SPARSE_ROS_SECTIONS = 5
_LEADING_COUNT = re.compile(r"^\s*(\d+)")


def _join(items: List[str]) -> str:
    return ", ".join(items)


# Subjective


def subjective_narrative(data: DocumentSubjectiveInput) -> str:
    hpi = data.history_present_illness
    opqrst = hpi.opqrst
    severity = format_number(opqrst.severity) if isinstance(opqrst.severity, float) else opqrst.severity
    lines = [
        f'Chief Complaint: "{data.chief_complaint}"',
        "",
        "History of Present Illness:",
        f"The patient reports {opqrst.onset}.",
        f"The symptom is {opqrst.quality} and is located {opqrst.region}.",
        f"Severity is rated as {severity} on a 0-10 scale.",
        f"The symptom is {opqrst.palliating_provoking}.",
        f"Time course: {opqrst.time_course}.",
    ]
    if hpi.associated_symptoms:
        lines.append(f"Associated symptoms include: {_join(hpi.associated_symptoms)}.")
    if hpi.previous_episodes:
        lines.append("Patient has had previous episodes of similar symptoms.")
    if hpi.previous_treatments:
        lines.append(f"Previous treatments tried: {_join(hpi.previous_treatments)}.")

    lines += ["", "Review of Systems:"]
    for system in REVIEW_OF_SYSTEMS:
        symptoms = getattr(data.review_of_systems, system)
        if symptoms:
            lines.append(f"{system.capitalize()}: {_join(symptoms)}.")

    compliance = data.medications_compliance
    lines += ["", "Medications and Compliance:"]
    if compliance.taking_as_prescribed:
        lines.append("Patient reports taking medications as prescribed.")
    else:
        lines.append("Patient reports not taking medications as prescribed.")
        if compliance.missed_doses:
            lines.append(f"Missed doses: {compliance.missed_doses}.")
    if compliance.side_effects_reported:
        lines.append(f"Side effects reported: {_join(compliance.side_effects_reported)}.")
    lines.append("")

    if data.social_history_updates:
        lines += [f"Social History Updates: {data.social_history_updates}", ""]
    lines.append(f"Functional Status: {data.functional_status}")
    return "\n".join(lines)


def subjective_completeness(data: DocumentSubjectiveInput) -> Dict[str, Any]:
    opqrst = data.history_present_illness.opqrst
    compliance = data.medications_compliance
    missing: List[str] = []
    score = 100

    checks = [
        (not data.chief_complaint.strip(), "Chief complaint", 20),
        (not opqrst.onset.strip(), "Onset of symptoms", 10),
        (not opqrst.quality.strip(), "Quality of symptoms", 10),
        (isinstance(opqrst.severity, str) and not opqrst.severity.strip(), "Severity rating", 10),
        (not compliance.taking_as_prescribed and not compliance.missed_doses, "Medication compliance details", 5),
        (not data.functional_status.strip(), "Functional status", 5),
    ]
    empty_ros = sum(1 for system in REVIEW_OF_SYSTEMS if not getattr(data.review_of_systems, system))
    checks.append((empty_ros > SPARSE_ROS_SECTIONS, "Comprehensive review of systems", 10))

    for failed, element, penalty in checks:
        if failed:
            missing.append(element)
            score -= penalty
    return {"score": max(0, score), "missing_elements": missing}


def subjective_red_flags(data: DocumentSubjectiveInput, reference: ReferenceData) -> List[str]:
    flags: List[str] = []
    severity = data.history_present_illness.opqrst.severity
    if isinstance(severity, float) and severity >= HIGH_SEVERITY_SCORE:
        flags.append("High severity symptoms (8-10/10)")

    for system in REVIEW_OF_SYSTEMS:
        for symptom in getattr(data.review_of_systems, system):
            if any(concern in symptom.lower() for concern in reference.concerning_symptoms):
                flags.append(f"Concerning symptom reported: {symptom}")

    compliance = data.medications_compliance
    missed = compliance.missed_doses.lower()
    if not compliance.taking_as_prescribed and ("critical" in missed or "life-saving" in missed):
        flags.append("Non-compliance with critical medications")

    status = data.functional_status.lower()
    if any(word in status for word in FUNCTIONAL_DECLINE_WORDS):
        flags.append("Functional decline reported")
    return flags


def document_subjective(
    data: DocumentSubjectiveInput,
    reference: ReferenceData,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    completeness = subjective_completeness(data)
    return {
        "subjective_section": {
            "section_id": new_id("subj", now),
            "patient_id": data.patient_id,
            "encounter_id": data.encounter_id,
            "narrative": subjective_narrative(data),
            "structured_data": {
                "chief_complaint": data.chief_complaint,
                "history_present_illness": data.history_present_illness.model_dump(mode="json"),
                "review_of_systems": data.review_of_systems.model_dump(mode="json"),
                "medications_compliance": data.medications_compliance.model_dump(mode="json"),
                "social_history": data.social_history_updates,
                "functional_status": data.functional_status,
            },
            "completeness_score": completeness["score"],
            "missing_elements": completeness["missing_elements"],
            "red_flags_identified": subjective_red_flags(data, reference),
        }
    }


# Objective


def objective_narrative(data: DocumentObjectiveInput) -> str:
    vitals = data.vital_signs
    exam = data.physical_examination
    cardio = exam.systems_examined.cardiovascular
    resp = exam.systems_examined.respiratory

    lines = [
        "Vital Signs:",
        f"Temperature: {format_number(vitals.temperature)}°C",
        f"Heart Rate: {format_number(vitals.heart_rate)} bpm",
        f"Blood Pressure: {vitals.blood_pressure} mmHg",
        f"Respiratory Rate: {format_number(vitals.respiratory_rate)} breaths/min",
        f"Oxygen Saturation: {format_number(vitals.oxygen_saturation)}% on {vitals.oxygen_delivery}",
    ]
    if vitals.pain_score is not None:
        lines.append(f"Pain Score: {format_number(vitals.pain_score)}/10")
    if vitals.weight is not None:
        lines.append(f"Weight: {format_number(vitals.weight)} kg")
    if vitals.bmi is not None:
        lines.append(f"BMI: {format_number(vitals.bmi)}")

    lines += [
        "",
        "Physical Examination:",
        f"General: {exam.general_appearance}",
        "Cardiovascular:",
        f"Heart sounds: {cardio.heart_sounds}",
    ]
    if cardio.murmurs:
        lines.append(f"Murmurs: {cardio.murmurs}")
    lines += [
        f"Peripheral pulses: {cardio.peripheral_pulses}",
        f"Edema: {cardio.edema}",
        "Respiratory:",
        f"Inspection: {resp.inspection}",
        f"Auscultation: {resp.auscultation}",
        f"Percussion: {resp.percussion}",
    ]
    lines += [f"{system}: {findings}" for system, findings in exam.systems_examined.other_systems.items()]
    lines.append("")

    if data.laboratory_results:
        lines.append("Laboratory Results:")
        lines += [f"{lab.test_name}: {lab.result} ({lab.reference_range}) [{lab.flag}]" for lab in data.laboratory_results]
        lines.append("")
    if data.imaging_results:
        lines.append("Imaging Results:")
        for study in data.imaging_results:
            lines += [f"{study.study_type}: {study.findings}", f"Impression: {study.impression}"]
        lines.append("")
    if data.other_diagnostic_results:
        lines.append("Other Diagnostic Results:")
        lines += [f"{test.test_name}: {test.result}" for test in data.other_diagnostic_results]
    return "\n".join(lines)


def _finding(category: str, finding: str, severity: str, significance: str) -> Dict[str, str]:
    return {"category": category, "finding": finding, "severity": severity, "clinical_significance": significance}


def _is_reported(text: str) -> bool:
    return bool(text) and text.strip().lower() != "none"


def abnormal_findings(data: DocumentObjectiveInput) -> List[Dict[str, str]]:
    vitals = data.vital_signs
    heart_rate = format_number(vitals.heart_rate)
    findings = []
    if vitals.heart_rate > 100:
        findings.append(
            _finding(
                "Vital Signs",
                f"Tachycardia: HR {heart_rate} bpm",
                "moderate" if vitals.heart_rate > 120 else "mild",
                "May indicate stress, fever, or cardiac issues",
            )
        )
    if vitals.heart_rate < 60:
        findings.append(
            _finding(
                "Vital Signs",
                f"Bradycardia: HR {heart_rate} bpm",
                "moderate" if vitals.heart_rate < 50 else "mild",
                "May indicate medication effects or cardiac conduction issues",
            )
        )
    if vitals.oxygen_saturation < 95:
        findings.append(
            _finding(
                "Vital Signs",
                f"Low oxygen saturation: {format_number(vitals.oxygen_saturation)}%",
                "severe" if vitals.oxygen_saturation < 90 else "moderate",
                "May indicate respiratory or cardiac issues",
            )
        )

    for lab in data.laboratory_results:
        if lab.flag != "normal":
            findings.append(
                _finding(
                    "Laboratory",
                    f"{lab.test_name}: {lab.result} ({lab.flag})",
                    "critical" if lab.flag == "critical" else "moderate",
                    f"Abnormal {lab.test_name} may indicate underlying pathology",
                )
            )

    cardio = data.physical_examination.systems_examined.cardiovascular
    if _is_reported(cardio.murmurs):
        findings.append(
            _finding(
                "Physical Examination",
                f"Cardiac murmur: {cardio.murmurs}",
                "mild",
                "May indicate valvular disease or flow abnormalities",
            )
        )
    if _is_reported(cardio.edema):
        findings.append(
            _finding(
                "Physical Examination",
                f"Edema: {cardio.edema}",
                "moderate",
                "May indicate heart failure, venous insufficiency, or other conditions",
            )
        )
    return findings


def critical_values(data: DocumentObjectiveInput) -> List[Dict[str, str]]:
    vitals = data.vital_signs
    values = [
        {
            "test_name": lab.test_name,
            "value": lab.result,
            "reference_range": lab.reference_range,
            "clinical_implication": f"Critical {lab.test_name} value requires immediate attention",
        }
        for lab in data.laboratory_results
        if lab.flag == "critical"
    ]
    if vitals.oxygen_saturation < 90:
        values.append(
            {
                "test_name": "Oxygen Saturation",
                "value": f"{format_number(vitals.oxygen_saturation)}%",
                "reference_range": "95-100%",
                "clinical_implication": "Critical hypoxemia - immediate oxygen therapy required",
            }
        )
    if vitals.heart_rate > 150 or vitals.heart_rate < 40:
        values.append(
            {
                "test_name": "Heart Rate",
                "value": f"{format_number(vitals.heart_rate)} bpm",
                "reference_range": "60-100 bpm",
                "clinical_implication": "Critical heart rate - immediate cardiac assessment required",
            }
        )
    return values


def _distance_from_band(value: float, band: tuple) -> float:
    low, high = band
    if value < low:
        return low - value
    if value > high:
        return value - high
    return 0.0


def vital_trends(data: DocumentObjectiveInput) -> List[Dict[str, str]]:
    """Compare each vital against the previous set by how far it sits outside its normal band."""
    previous = data.previous_vital_signs
    if previous is None:
        return []
    trends = []
    for parameter, band in VITAL_TREND_BANDS.items():
        before = getattr(previous, parameter)
        if before is None:
            continue
        now_value = getattr(data.vital_signs, parameter)
        before_gap = _distance_from_band(before, band)
        now_gap = _distance_from_band(now_value, band)
        if now_gap < before_gap:
            trend = "improving"
        elif now_gap > before_gap:
            trend = "worsening"
        else:
            trend = "stable"
        trends.append(
            {
                "parameter": parameter.replace("_", " ").title(),
                "previous_value": format_number(before),
                "current_value": format_number(now_value),
                "trend": trend,
            }
        )
    return trends


def document_objective(
    data: DocumentObjectiveInput,
    reference: ReferenceData,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    return {
        "objective_section": {
            "section_id": new_id("obj", now),
            "encounter_id": data.encounter_id,
            "narrative": objective_narrative(data),
            "structured_data": {
                "vital_signs": data.vital_signs.model_dump(mode="json"),
                "physical_examination": data.physical_examination.model_dump(mode="json"),
                "laboratory_results": [lab.model_dump(mode="json") for lab in data.laboratory_results],
                "imaging_results": [study.model_dump(mode="json") for study in data.imaging_results],
                "other_diagnostic_results": [test.model_dump(mode="json") for test in data.other_diagnostic_results],
            },
            "abnormal_findings": abnormal_findings(data),
            "critical_values": critical_values(data),
            "trends_from_previous": vital_trends(data),
        }
    }


# Assessment


def _sex_word(sex: str) -> str:
    return {"M": "male", "F": "female"}.get(sex, "patient")


def assessment_summary(data: DocumentAssessmentInput) -> str:
    demographics = data.patient_demographics
    diagnosis = data.working_diagnosis
    return (
        f"{format_number(demographics.age)}-year-old {_sex_word(demographics.sex)} with {diagnosis.primary}, "
        f"currently {diagnosis.clinical_stability}."
    )


def assessment_narrative(data: DocumentAssessmentInput) -> str:
    diagnosis = data.working_diagnosis
    lines = ["Assessment:", f"1. {diagnosis.primary} ({diagnosis.confidence} confidence)"]

    lines += ["", "Differential Diagnoses:"]
    for number, diff in enumerate(data.differential_diagnoses, start=2):
        lines.append(f"{number}. {diff.diagnosis} ({diff.probability} probability)")
        if diff.supporting_features:
            lines.append(f"   Supporting: {_join(diff.supporting_features)}")
        if diff.against_features:
            lines.append(f"   Against: {_join(diff.against_features)}")
        if diff.requires_rule_out:
            lines.append("   * Requires ruling out")

    if data.problem_list:
        lines += ["", "Problem List:"]
        ranked = sorted(data.problem_list, key=lambda problem: problem.priority)
        for number, problem in enumerate(ranked, start=1):
            lines.append(f"{number}. {problem.problem} ({problem.status}, Priority {problem.priority})")

    lines += ["", f"Clinical Status: {diagnosis.clinical_stability}"]
    return "\n".join(lines)


def _has_high_risk_differential(data: DocumentAssessmentInput) -> bool:
    return any(diff.probability == "high" and diff.requires_rule_out for diff in data.differential_diagnoses)


def risk_stratification(data: DocumentAssessmentInput) -> Dict[str, Any]:
    diagnosis = data.working_diagnosis
    risks: List[str] = []
    score = {"critical": 4, "unstable": 3, "stable": 1}[diagnosis.clinical_stability]
    if diagnosis.clinical_stability == "critical":
        risks.append("Critical clinical status")
    elif diagnosis.clinical_stability == "unstable":
        risks.append("Unstable clinical status")

    score += {"low": 2, "moderate": 1, "high": 0}[diagnosis.confidence]
    if diagnosis.confidence == "low":
        risks.append("Low confidence in diagnosis")

    if _has_high_risk_differential(data):
        score += 2
        risks.append("High-risk differential diagnoses requiring rule-out")
    if any(problem.priority <= 2 and problem.status == "active" for problem in data.problem_list):
        score += 1
        risks.append("High-priority active problems")

    if score >= 5:
        overall = "critical"
    elif score >= 3:
        overall = "high"
    elif score >= 2:
        overall = "moderate"
    else:
        overall = "low"
    return {"overall_risk": overall, "specific_risks": risks, "risk_score": score}


def prognosis(data: DocumentAssessmentInput) -> str:
    stability = data.working_diagnosis.clinical_stability
    confidence = data.working_diagnosis.confidence
    if stability == "critical":
        text = "Guarded prognosis due to critical clinical status. Immediate intervention required."
    elif stability == "unstable":
        text = "Prognosis depends on response to treatment and underlying condition severity."
    elif confidence == "high":
        text = "Good prognosis with appropriate treatment and monitoring."
    elif confidence == "moderate":
        text = "Prognosis good with continued evaluation and treatment."
    else:
        text = "Prognosis uncertain pending further evaluation and diagnostic workup."
    if _has_high_risk_differential(data):
        text += " Close monitoring required due to high-risk differential diagnoses."
    return text


def document_assessment(
    data: DocumentAssessmentInput,
    reference: ReferenceData,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    return {
        "assessment_section": {
            "section_id": new_id("assess", now),
            "encounter_id": data.encounter_id,
            "clinical_summary": assessment_summary(data),
            "narrative": assessment_narrative(data),
            "structured_assessment": {
                "working_diagnosis": data.working_diagnosis.model_dump(mode="json"),
                "differential_diagnoses": [diff.model_dump(mode="json") for diff in data.differential_diagnoses],
                "problem_list": [problem.model_dump(mode="json") for problem in data.problem_list],
            },
            "risk_stratification": risk_stratification(data),
            "prognosis": prognosis(data),
        }
    }


# Plan


def plan_narrative(data: DocumentPlanInput) -> str:
    treatment = data.treatment_plan
    diagnostics = data.diagnostic_plan
    monitoring = data.monitoring_plan
    education = data.patient_education
    follow_up = data.disposition.follow_up
    lines = ["Plan:"]

    if treatment.medications:
        lines.append("Medications:")
        for med in treatment.medications:
            lines.append(
                f"- {med.action.capitalize()} {med.drug_name} {med.dose} {med.frequency} {med.route} "
                f"for {med.duration} ({med.indication})"
            )
            if med.monitoring_required:
                lines.append(f"  Monitor: {_join(med.monitoring_required)}")
    if treatment.procedures:
        lines.append("Procedures:")
        lines += [f"- {proc.procedure} ({proc.timing}) - {proc.indication}" for proc in treatment.procedures]
    if treatment.non_pharmacologic:
        lines.append("Non-pharmacologic interventions:")
        lines += [f"- {item}" for item in treatment.non_pharmacologic]
    if treatment.lifestyle_modifications:
        lines.append("Lifestyle modifications:")
        lines += [f"- {item}" for item in treatment.lifestyle_modifications]

    if diagnostics.laboratory_tests or diagnostics.imaging_studies or diagnostics.consultations:
        lines += ["", "Diagnostic Plan:"]
        if diagnostics.laboratory_tests:
            lines.append(f"Laboratory: {_join(diagnostics.laboratory_tests)}")
        if diagnostics.imaging_studies:
            lines.append(f"Imaging: {_join(diagnostics.imaging_studies)}")
        lines += [
            f"Consultation: {consult.specialty} ({consult.urgency}) - {consult.reason}"
            for consult in diagnostics.consultations
        ]

    if monitoring.parameters:
        lines += [
            "",
            "Monitoring Plan:",
            f"Parameters: {_join(monitoring.parameters)}",
            f"Frequency: {monitoring.frequency}",
            f"Duration: {monitoring.duration}",
        ]
        if monitoring.action_triggers:
            lines.append(f"Action triggers: {_join(monitoring.action_triggers)}")

    if education.topics_covered:
        lines += [
            "",
            "Patient Education:",
            f"Topics: {_join(education.topics_covered)}",
            f"Understanding: {education.patient_understanding}",
        ]
        if education.materials_provided:
            lines.append(f"Materials provided: {_join(education.materials_provided)}")

    lines += [
        "",
        "Disposition:",
        f"Location: {data.disposition.location}",
        f"Follow-up: {follow_up.provider} in {follow_up.timeframe}",
    ]
    if follow_up.specific_issues:
        lines.append(f"Specific issues: {_join(follow_up.specific_issues)}")
    return "\n".join(lines)


def orders_to_place(data: DocumentPlanInput) -> List[Dict[str, str]]:
    orders = [
        {
            "type": "medication",
            "description": f"{med.action} {med.drug_name}",
            "urgency": "routine",
            "details": f"{med.dose} {med.frequency} {med.route} for {med.duration}",
        }
        for med in data.treatment_plan.medications
        if med.action in ("start", "modify")
    ]
    orders += [
        {"type": "procedure", "description": proc.procedure, "urgency": proc.timing, "details": proc.indication}
        for proc in data.treatment_plan.procedures
    ]
    orders += [
        {"type": "laboratory", "description": test, "urgency": "routine", "details": "As ordered"}
        for test in data.diagnostic_plan.laboratory_tests
    ]
    orders += [
        {"type": "imaging", "description": study, "urgency": "routine", "details": "As ordered"}
        for study in data.diagnostic_plan.imaging_studies
    ]
    orders += [
        {"type": "consultation", "description": c.specialty, "urgency": c.urgency, "details": c.reason}
        for c in data.diagnostic_plan.consultations
    ]
    return orders


def patient_instructions(data: DocumentPlanInput) -> str:
    monitoring = data.monitoring_plan
    follow_up = data.disposition.follow_up
    lines: List[str] = []

    started = [med for med in data.treatment_plan.medications if med.action == "start"]
    if started:
        lines.append("Medication Instructions:")
        for med in started:
            lines += [
                f"- Take {med.drug_name} {med.dose} {med.frequency} {med.route} for {med.duration}",
                f"  Reason: {med.indication}",
            ]
    if data.treatment_plan.lifestyle_modifications:
        lines.append("Lifestyle Modifications:")
        lines += [f"- {item}" for item in data.treatment_plan.lifestyle_modifications]
    if monitoring.parameters:
        lines += [
            "Monitoring Instructions:",
            f"- Monitor: {_join(monitoring.parameters)}",
            f"- Frequency: {monitoring.frequency}",
            f"- Duration: {monitoring.duration}",
        ]

    lines += [
        "Follow-up Instructions:",
        f"- Follow-up with: {follow_up.provider}",
        f"- Timeframe: {follow_up.timeframe}",
    ]
    if follow_up.specific_issues:
        lines.append(f"- Address: {_join(follow_up.specific_issues)}")
    if monitoring.action_triggers:
        lines.append("Warning Signs (contact provider if these occur):")
        lines += [f"- {trigger}" for trigger in monitoring.action_triggers]
    return "\n".join(lines)


def follow_up_date(timeframe: str, now: datetime) -> datetime:
    """Read "N week(s)" or "N month(s)" (a month is 30 days). Anything else means one week."""
    match = _LEADING_COUNT.match(timeframe)
    count = int(match.group(1)) if match and int(match.group(1)) > 0 else 1
    text = timeframe.lower()
    if "week" in text:
        return now + timedelta(weeks=count)
    if "month" in text:
        return now + timedelta(days=30 * count)
    return now + timedelta(days=7)


def document_plan(
    data: DocumentPlanInput,
    reference: ReferenceData,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or utc_now()
    follow_up = data.disposition.follow_up
    return {
        "plan_section": {
            "section_id": new_id("plan", now),
            "encounter_id": data.encounter_id,
            "narrative": plan_narrative(data),
            "structured_plan": {
                "treatment_plan": data.treatment_plan.model_dump(mode="json"),
                "diagnostic_plan": data.diagnostic_plan.model_dump(mode="json"),
                "monitoring_plan": data.monitoring_plan.model_dump(mode="json"),
                "patient_education": data.patient_education.model_dump(mode="json"),
                "disposition": data.disposition.model_dump(mode="json"),
            },
            "orders_to_place": orders_to_place(data),
            "prescriptions_to_write": [
                {
                    "drug_name": med.drug_name,
                    "dose": med.dose,
                    "frequency": med.frequency,
                    "route": med.route,
                    "duration": med.duration,
                    "indication": med.indication,
                }
                for med in data.treatment_plan.medications
                if med.action in ("start", "modify")
            ],
            "referrals_to_generate": [
                {"specialty": c.specialty, "urgency": c.urgency, "reason": c.reason}
                for c in data.diagnostic_plan.consultations
            ],
            "patient_instructions": patient_instructions(data),
            "follow_up_schedule": [
                {
                    "date": follow_up_date(follow_up.timeframe, now).date().isoformat(),
                    "provider": follow_up.provider,
                    "purpose": _join(follow_up.specific_issues) or "Routine follow-up",
                }
            ],
        }
    }


# Note compilation


def coding_suggestions(data: CompileSoapNoteInput, reference: ReferenceData) -> Dict[str, Any]:
    meta = data.note_metadata
    cpt_codes = [next(code for minutes, code in reference.cpt_by_time if meta.time_spent >= minutes)]
    if meta.complexity_level in reference.cpt_by_complexity:
        cpt_codes.append(reference.cpt_by_complexity[meta.complexity_level])
    if meta.encounter_type in reference.cpt_by_encounter:
        cpt_codes.append(reference.cpt_by_encounter[meta.encounter_type])
    return {
        "icd10_codes": list(reference.icd10_by_encounter.get(meta.encounter_type, ())),
        "cpt_codes": cpt_codes,
        "complexity_level": meta.complexity_level,
    }


def note_sections(data: CompileSoapNoteInput) -> Dict[str, str]:
    texts = data.section_texts
    ids = {
        "subjective": data.subjective_section_id,
        "objective": data.objective_section_id,
        "assessment": data.assessment_section_id,
        "plan": data.plan_section_id,
    }
    return {
        name: getattr(texts, name) or f"[{name.capitalize()} content from section {section_id}]"
        for name, section_id in ids.items()
    }


def note_full_text(data: CompileSoapNoteInput, sections: Dict[str, str], now: datetime) -> str:
    provider = data.provider_info
    meta = data.note_metadata
    signed_by = f"Provider: {provider.provider_name}, {provider.credentials}"
    lines = [
        "SOAP NOTE",
        "=" * 50,
        f"Encounter ID: {data.encounter_id}",
        signed_by,
        f"Encounter Type: {meta.encounter_type}",
        f"Note Type: {meta.note_type}",
        f"Time Spent: {format_number(meta.time_spent)} minutes",
        f"Complexity: {meta.complexity_level}",
        f"Date: {now.date().isoformat()}",
        "",
    ]
    for name, text in sections.items():
        lines += [name.upper(), "-" * 20, text, ""]
    lines += [
        "=" * 50,
        signed_by,
        f"Signature: {'Signed' if provider.signature else 'Not signed'}",
        f"Date: {iso(now)}",
    ]
    return "\n".join(lines)


def compile_soap_note(
    data: CompileSoapNoteInput,
    reference: ReferenceData,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or utc_now()
    sections = note_sections(data)
    texts = data.section_texts
    all_supplied = all(getattr(texts, name) for name in sections)
    return {
        "complete_note": {
            "note_id": new_id("soap", now),
            "encounter_id": data.encounter_id,
            "patient_id": data.patient_id,
            "encounter_datetime": iso(data.encounter_datetime or now),
            "note_completion_datetime": iso(now),
            "sections": sections,
            "full_text": note_full_text(data, sections, now),
            "quality_checks": {
                "all_sections_complete": all_supplied,
                "signed": data.provider_info.signature,
                "coding_suggested": coding_suggestions(data, reference),
            },
            "addendum_capability": True,
        }
    }
