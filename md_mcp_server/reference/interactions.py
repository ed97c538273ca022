"""
Interaction screening rule tables and management templates.

Drug and condition names are compared lower-cased with spaces folded to
underscores, so "Vitamin K" matches the `vitamin_k` key.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple


@dataclass(frozen=True)
class DrugPairRule:
    first: str
    second: str
    severity: str
    mechanism: str
    effects: Tuple[str, ...]


@dataclass(frozen=True)
class DrugContextRule:
    """A drug (or drug-name fragment) paired with a condition or food key."""

    drugs: Tuple[str, ...]
    other: str
    severity: str
    mechanism: str
    effects: Tuple[str, ...]


@dataclass(frozen=True)
class ContraindicationRule:
    trigger: str
    drugs: Tuple[str, ...]
    entity_name: str
    mechanism: str
    effects: Tuple[str, ...]


@dataclass(frozen=True)
class ActionTemplate:
    action_type: str
    medication_affected: str
    details: str
    implementation_timeline: str


@dataclass(frozen=True)
class StrategyTemplate:
    strategy: str
    priority: int
    actions: Tuple[ActionTemplate, ...]
    parameters_to_monitor: Tuple[str, ...]
    monitoring_frequency: str
    monitoring_duration: str
    warning_signs: Tuple[str, ...]
    key_points: Tuple[str, ...]
    warning_symptoms: Tuple[str, ...]
    when_to_contact_provider: Tuple[str, ...]


DRUG_DRUG_RULES: Tuple[DrugPairRule, ...] = (
    DrugPairRule(
        first="warfarin",
        second="aspirin",
        severity="serious",
        mechanism="Increased bleeding risk due to dual antiplatelet/anticoagulant effects",
        effects=("Increased bleeding risk", "Bruising", "Gastrointestinal bleeding"),
    ),
    DrugPairRule(
        first="digoxin",
        second="furosemide",
        severity="moderate",
        mechanism="Furosemide-induced hypokalemia increases digoxin toxicity risk",
        effects=("Digoxin toxicity", "Arrhythmias", "Nausea and vomiting"),
    ),
    DrugPairRule(
        first="phenytoin",
        second="warfarin",
        severity="moderate",
        mechanism="Phenytoin induces warfarin metabolism, decreasing anticoagulant effect",
        effects=("Decreased warfarin effectiveness", "Increased thrombosis risk"),
    ),
)

DRUG_CONDITION_RULES: Tuple[DrugContextRule, ...] = (
    DrugContextRule(
        drugs=("metformin",),
        other="renal_failure",
        severity="contraindicated",
        mechanism="Metformin contraindicated in severe renal impairment due to lactic acidosis risk",
        effects=("Lactic acidosis", "Renal failure progression"),
    ),
    DrugContextRule(
        drugs=("ace_inhibitor",),
        other="pregnancy",
        severity="contraindicated",
        mechanism="ACE inhibitors contraindicated in pregnancy due to fetal toxicity",
        effects=("Fetal malformations", "Neonatal renal failure"),
    ),
)

# Drug fragments match by substring, so "statin" covers atorvastatin and friends.
DRUG_FOOD_RULES: Tuple[DrugContextRule, ...] = (
    DrugContextRule(
        drugs=("warfarin",),
        other="vitamin_k",
        severity="moderate",
        mechanism="Vitamin K antagonizes warfarin effect",
        effects=("Decreased anticoagulant effect", "Increased thrombosis risk"),
    ),
    DrugContextRule(
        drugs=("statin",),
        other="grapefruit",
        severity="moderate",
        mechanism="Grapefruit inhibits CYP3A4, increasing statin levels",
        effects=("Increased statin levels", "Muscle toxicity risk"),
    ),
)

CONTRAINDICATION_RULES: Tuple[ContraindicationRule, ...] = (
    ContraindicationRule(
        trigger="pregnancy",
        drugs=("warfarin", "ace_inhibitor", "statin"),
        entity_name="Pregnancy",
        mechanism="Drug contraindicated in pregnancy due to fetal toxicity risk",
        effects=("Fetal malformations", "Pregnancy complications"),
    ),
    ContraindicationRule(
        trigger="renal_impairment",
        drugs=("metformin", "nsaid"),
        entity_name="Renal impairment",
        mechanism="Drug contraindicated in renal impairment due to toxicity risk",
        effects=("Renal toxicity", "Drug accumulation"),
    ),
)

# Ordered by priority; `{alternative}` is filled with the selected drug.
MANAGEMENT_STRATEGIES: Mapping[str, StrategyTemplate] = MappingProxyType(
    {
        "use_alternative": StrategyTemplate(
            strategy="use_alternative",
            priority=1,
            actions=(
                ActionTemplate(
                    action_type="substitute",
                    medication_affected="Current medication",
                    details="Substitute with {alternative} to avoid interaction",
                    implementation_timeline="Immediate (within 24 hours)",
                ),
            ),
            parameters_to_monitor=("Therapeutic response", "Adverse effects", "Drug levels if applicable"),
            monitoring_frequency="Weekly for first month, then monthly",
            monitoring_duration="Duration of therapy",
            warning_signs=("Loss of therapeutic effect", "New adverse effects", "Signs of toxicity"),
            key_points=(
                "Medication change is necessary to avoid harmful interaction",
                "New medication should provide same therapeutic benefit",
                "Report any new symptoms or concerns",
            ),
            warning_symptoms=("Worsening of condition", "New side effects", "Unusual symptoms"),
            when_to_contact_provider=(
                "If condition worsens",
                "If new symptoms develop",
                "If concerns about medication",
            ),
        ),
        "adjust_doses": StrategyTemplate(
            strategy="adjust_doses",
            priority=2,
            actions=(
                ActionTemplate(
                    action_type="adjust_dose",
                    medication_affected="Both medications",
                    details="Reduce doses of both medications to minimize interaction risk",
                    implementation_timeline="Within 48 hours",
                ),
                ActionTemplate(
                    action_type="add_monitoring",
                    medication_affected="Both medications",
                    details="Implement enhanced monitoring for interaction effects",
                    implementation_timeline="Immediate",
                ),
            ),
            parameters_to_monitor=("Drug levels", "Therapeutic response", "Adverse effects", "Organ function"),
            monitoring_frequency="Weekly for first month",
            monitoring_duration="Duration of therapy",
            warning_signs=("Loss of therapeutic effect", "Signs of toxicity", "Organ dysfunction"),
            key_points=(
                "Dose adjustments are necessary to minimize interaction risk",
                "Close monitoring is required",
                "Report any changes in condition or new symptoms",
            ),
            warning_symptoms=("Worsening of condition", "Signs of toxicity", "Organ dysfunction"),
            when_to_contact_provider=(
                "If condition worsens",
                "If signs of toxicity",
                "If concerns about therapy",
            ),
        ),
        "separate_administration": StrategyTemplate(
            strategy="separate_administration",
            priority=3,
            actions=(
                ActionTemplate(
                    action_type="adjust_timing",
                    medication_affected="Both medications",
                    details="Separate administration times to minimize interaction",
                    implementation_timeline="Immediate",
                ),
            ),
            parameters_to_monitor=("Therapeutic response", "Adverse effects"),
            monitoring_frequency="Bi-weekly",
            monitoring_duration="Duration of therapy",
            warning_signs=("Loss of therapeutic effect", "Adverse effects"),
            key_points=(
                "Take medications at different times to avoid interaction",
                "Maintain consistent timing",
                "Use pill organizer if needed",
            ),
            warning_symptoms=("Worsening of condition", "New side effects"),
            when_to_contact_provider=("If condition worsens", "If new symptoms develop"),
        ),
        "monitor_closely": StrategyTemplate(
            strategy="monitor_closely",
            priority=4,
            actions=(
                ActionTemplate(
                    action_type="add_monitoring",
                    medication_affected="Both medications",
                    details="Implement enhanced monitoring for potential interaction effects",
                    implementation_timeline="Immediate",
                ),
            ),
            parameters_to_monitor=("Therapeutic response", "Adverse effects", "Patient symptoms"),
            monitoring_frequency="Monthly",
            monitoring_duration="Duration of therapy",
            warning_signs=("Loss of therapeutic effect", "Adverse effects", "Patient concerns"),
            key_points=(
                "Continue current medications with close monitoring",
                "Report any changes in condition",
                "Regular follow-up appointments are important",
            ),
            warning_symptoms=("Worsening of condition", "New side effects", "Unusual symptoms"),
            when_to_contact_provider=(
                "If condition worsens",
                "If new symptoms develop",
                "If concerns about therapy",
            ),
        ),
    }
)

EVIDENCE_GUIDELINES: Tuple[str, ...] = (
    "WHO Guidelines for Drug Interaction Management",
    "FDA Drug Interaction Guidelines",
    "Clinical Pharmacy Practice Guidelines",
)

EVIDENCE_STUDIES: Tuple[str, ...] = (
    "Systematic review of drug interaction management strategies",
    "Pharmacokinetic interaction studies",
    "Clinical outcome studies",
)

EXPERT_OPINION = (
    "Recommendations based on clinical experience and expert consensus "
    "from clinical pharmacists and physicians."
)
