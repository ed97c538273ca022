"""
Static clinical reference tables.

The tables are illustrative constants, not a source of medical truth. They
are gathered into one immutable `ReferenceData` bundle that is loaded once
per process and passed to every evaluator, so tests can swap in fixture
tables without touching module globals.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional, Tuple

from . import clinical_rules, five_rights, integration, interactions, lab_ranges, medrec, soap, tdm, vital_signs
from .clinical_rules import ClinicalRule
from .interactions import ContraindicationRule, DrugContextRule, DrugPairRule, StrategyTemplate
from .lab_ranges import LabReferenceRange
from .medrec import BpmhCategory
from .tdm import DrugMonitoring, SpecimenRequirement, TdmProfile
from .vital_signs import VitalSignRange


@dataclass(frozen=True)
class ReferenceData:
    # therapeutic drug monitoring
    tdm_profiles: Mapping[str, TdmProfile]
    renal_steady_state_multipliers: Mapping[str, float]
    hepatic_steady_state_multipliers: Mapping[str, float]
    specimen_requirements: Tuple[SpecimenRequirement, ...]
    default_specimen: SpecimenRequirement
    drug_monitoring: Mapping[str, DrugMonitoring]
    toxic_level_monitoring: DrugMonitoring
    default_chart_range: Tuple[float, float]

    # interactions
    drug_drug_rules: Tuple[DrugPairRule, ...]
    drug_condition_rules: Tuple[DrugContextRule, ...]
    drug_food_rules: Tuple[DrugContextRule, ...]
    contraindication_rules: Tuple[ContraindicationRule, ...]
    management_strategies: Mapping[str, StrategyTemplate]

    # medication reconciliation
    bpmh_categories: Tuple[BpmhCategory, ...]

    # SOAP documentation
    concerning_symptoms: Tuple[str, ...]
    icd10_by_encounter: Mapping[str, Tuple[str, ...]]
    cpt_by_time: Tuple[Tuple[int, str], ...]
    cpt_by_complexity: Mapping[str, str]
    cpt_by_encounter: Mapping[str, str]

    # five rights
    dosing_intervals: Tuple[Tuple[Tuple[str, ...], int], ...]
    formulation_routes: Mapping[str, Optional[Tuple[str, ...]]]

    # integration
    protocol_tools: Mapping[str, Tuple[str, ...]]
    scenario_protocols: Mapping[str, Tuple[str, ...]]
    known_interaction_pairs: Tuple[Tuple[str, str], ...]

    # resources
    lab_ranges: Tuple[LabReferenceRange, ...]
    vital_signs: Tuple[VitalSignRange, ...]
    clinical_rules: Tuple[ClinicalRule, ...]


@lru_cache(maxsize=1)
def load_reference_data() -> ReferenceData:
    return ReferenceData(
        tdm_profiles=tdm.TDM_PROFILES,
        renal_steady_state_multipliers=tdm.RENAL_STEADY_STATE_MULTIPLIERS,
        hepatic_steady_state_multipliers=tdm.HEPATIC_STEADY_STATE_MULTIPLIERS,
        specimen_requirements=tdm.SPECIMEN_REQUIREMENTS,
        default_specimen=tdm.DEFAULT_SPECIMEN,
        drug_monitoring=tdm.DRUG_MONITORING,
        toxic_level_monitoring=tdm.TOXIC_LEVEL_MONITORING,
        default_chart_range=tdm.DEFAULT_CHART_RANGE,
        drug_drug_rules=interactions.DRUG_DRUG_RULES,
        drug_condition_rules=interactions.DRUG_CONDITION_RULES,
        drug_food_rules=interactions.DRUG_FOOD_RULES,
        contraindication_rules=interactions.CONTRAINDICATION_RULES,
        management_strategies=interactions.MANAGEMENT_STRATEGIES,
        bpmh_categories=medrec.BPMH_CATEGORIES,
        concerning_symptoms=soap.CONCERNING_SYMPTOMS,
        icd10_by_encounter=soap.ICD10_BY_ENCOUNTER,
        cpt_by_time=soap.CPT_BY_TIME,
        cpt_by_complexity=soap.CPT_BY_COMPLEXITY,
        cpt_by_encounter=soap.CPT_BY_ENCOUNTER,
        dosing_intervals=five_rights.DOSING_INTERVALS,
        formulation_routes=five_rights.FORMULATION_ROUTES,
        protocol_tools=integration.PROTOCOL_TOOLS,
        scenario_protocols=integration.SCENARIO_PROTOCOLS,
        known_interaction_pairs=integration.KNOWN_INTERACTION_PAIRS,
        lab_ranges=lab_ranges.LAB_REFERENCE_RANGES,
        vital_signs=vital_signs.VITAL_SIGN_RANGES,
        clinical_rules=clinical_rules.CLINICAL_RULES,
    )
