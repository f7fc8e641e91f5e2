# dosing.py
import logging
from typing import List, Optional, Tuple

from .constants import AgeGroup, DosageStatus, DoseRule, MEDICATION_LIBRARY, MedicationProperties
from .models import DosageResult, DerivedValues, PatientProfile, DataTypeError

logger = logging.getLogger(__name__)

def _format_number(value: float) -> str:
    if value == int(value):
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")

def _age_group(age_years: int, age_months: int) -> AgeGroup:
    total_months = age_years * 12 + age_months
    if total_months == 0:
        return AgeGroup.NEONATE
    if total_months <= 12:
        return AgeGroup.INFANT
    if age_years <= 2:
        return AgeGroup.TODDLER
    if age_years <= 11:
        return AgeGroup.CHILD
    if age_years <= 17:
        return AgeGroup.ADOLESCENT
    if age_years <= 64:
        return AgeGroup.ADULT
    return AgeGroup.GERIATRIC

def _not_calculated(medication_id: str, status: DosageStatus, message: str,
                    name: str = "", indication: str = "") -> DosageResult:
    return DosageResult(
        medication_id=medication_id,
        dose_amount=0.0,
        unit="",
        formula_description="",
        max_dose_description="",
        route="",
        status=status,
        name=name,
        indication=indication,
        warnings=[message]
    )

class DosingCalculator:
    @staticmethod
    def _dose_per_kg(med: MedicationProperties, age_years: int) -> float:
        for upper_years, per_kg in med.age_dose_per_kg:
            if age_years < upper_years:
                return per_kg
        return med.dose_per_kg

    @staticmethod
    def _select_rule(med: MedicationProperties, indication: Optional[str],
                     age_years: int, age_months: int) -> Tuple[Optional[DoseRule], DosageStatus]:
        """
        No indication (or the default one) -> the medication's own per-kg rule.
        Otherwise: exact age group, then an all-ages rule, then the adult rule for
        geriatric patients.
        """
        key = (indication or "").strip().lower()
        if not key or key == med.indication.lower():
            return DoseRule(
                indication=med.indication,
                route=med.route,
                dose_per_kg=DosingCalculator._dose_per_kg(med, age_years),
                max_dose=med.max_dose,
                min_dose=med.min_dose,
                preparation=med.preparation
            ), DosageStatus.CALCULATED

        rules = [r for r in med.indication_rules if r.indication.lower() == key]
        if not rules:
            return None, DosageStatus.UNKNOWN_INDICATION

        group = _age_group(age_years, age_months)
        for wanted in (group, None):
            for rule in rules:
                if rule.age_group == wanted:
                    return rule, DosageStatus.CALCULATED
        if group == AgeGroup.GERIATRIC:
            for rule in rules:
                if rule.age_group == AgeGroup.ADULT:
                    return rule, DosageStatus.CALCULATED
        return None, DosageStatus.NO_RULE_FOR_AGE

    @staticmethod
    def calculate_dosage(medication_id: str, weight_kg: float, age_years: int,
                         indication: Optional[str] = None, age_months: int = 0) -> DosageResult:
        """
        Weight-based single dose, silently clamped to the medication's cap.
        An unknown id gives status UNKNOWN_MEDICATION with a 0.0 placeholder dose;
        an unknown indication or one without a rule for the age group gives
        UNKNOWN_INDICATION / NO_RULE_FOR_AGE the same way.
        """
        if isinstance(weight_kg, bool) or not isinstance(weight_kg, (int, float)):
            raise DataTypeError(f"'weight_kg' must be numeric, got {type(weight_kg)}")
        if isinstance(age_years, bool) or not isinstance(age_years, int):
            raise DataTypeError(f"'age_years' must be an integer, got {type(age_years)}")
        if isinstance(age_months, bool) or not isinstance(age_months, int):
            raise DataTypeError(f"'age_months' must be an integer, got {type(age_months)}")
        if indication is not None and not isinstance(indication, str):
            raise DataTypeError(f"'indication' must be a string, got {type(indication)}")

        med = MEDICATION_LIBRARY.get(medication_id)
        if med is None:
            logger.info(f"Unknown medication requested: {medication_id!r}")
            return _not_calculated(medication_id, DosageStatus.UNKNOWN_MEDICATION,
                                   f"Unknown medication: {medication_id}")

        canonical_id = MEDICATION_LIBRARY.canonical_id(medication_id)
        rule, status = DosingCalculator._select_rule(med, indication, age_years, age_months)
        if status == DosageStatus.UNKNOWN_INDICATION:
            logger.info(f"Unknown indication {indication!r} for {canonical_id}")
            return _not_calculated(canonical_id, status,
                                   f"Indication '{indication}' not available for {med.name}",
                                   name=med.name, indication=indication)
        if status == DosageStatus.NO_RULE_FOR_AGE:
            return _not_calculated(canonical_id, status,
                                   f"No {med.name} dosing for {indication} in this age group",
                                   name=med.name, indication=indication)

        cap = rule.max_dose if rule.max_dose is not None else med.max_dose
        warnings: List[str] = []

        if rule.fixed_dose is not None:
            raw_dose = rule.fixed_dose
            formula = f"{_format_number(rule.fixed_dose)} {med.unit} fixed dose"
        else:
            raw_dose = rule.dose_per_kg * weight_kg
            formula = f"{_format_number(rule.dose_per_kg)} {med.unit}/kg x {_format_number(weight_kg)} kg"

        # 1. Floor (e.g. atropine never below 0.1 mg)
        dose = raw_dose
        if rule.min_dose is not None and dose < rule.min_dose:
            dose = rule.min_dose
            warnings.append(f"Raised to minimum dose {_format_number(rule.min_dose)} {med.unit}")

        # 2. Cap: min(computed, cap), never an error
        at_cap = dose > cap
        dose = round(min(dose, cap), 2)
        if at_cap:
            warnings.append(
                f"Calculated {_format_number(round(raw_dose, 2))} {med.unit} exceeds maximum; "
                f"capped at {_format_number(cap)} {med.unit}"
            )

        # 3. Age restriction is a warning, the crew decides
        if med.min_age_months is not None and age_years * 12 + age_months < med.min_age_months:
            warnings.append(f"Not approved below {med.min_age_months} months of age")

        volume_ml: Optional[float] = None
        concentration = ""
        if med.concentration_per_ml:
            volume_ml = round(dose / med.concentration_per_ml, 2)
            concentration = f"{_format_number(med.concentration_per_ml)} {med.unit}/ml"
        elif med.unit == "ml":
            volume_ml = dose

        return DosageResult(
            medication_id=canonical_id,
            dose_amount=dose,
            unit=med.unit,
            formula_description=formula,
            max_dose_description=f"max. {_format_number(cap)} {med.unit}",
            route=rule.route,
            status=DosageStatus.CALCULATED,
            at_cap=at_cap,
            name=med.name,
            volume_ml=volume_ml,
            concentration_description=concentration,
            indication=rule.indication,
            preparation=rule.preparation,
            warnings=warnings
        )

    @staticmethod
    def calculate_for_profile(medication_id: str, profile: PatientProfile,
                              derived: DerivedValues, indication: Optional[str] = None) -> DosageResult:
        """Dose for the session patient: effective weight plus pregnancy and allergy notices."""
        result = DosingCalculator.calculate_dosage(
            medication_id, derived.effective_weight, profile.age_years,
            indication=indication, age_months=profile.age_months
        )
        if not result.is_known:
            return result

        if profile.is_pregnant:
            week = profile.week_of_pregnancy
            week_text = f"week {week}" if week is not None else "week unknown"
            result.warnings.append(f"Caution: patient is pregnant ({week_text})")
        if profile.allergies:
            result.warnings.append(f"Known allergies: {', '.join(profile.allergies)}")
        return result

    @staticmethod
    def indications_for(medication_id: str) -> List[str]:
        """Default indication first; empty for an unknown medication."""
        med = MEDICATION_LIBRARY.get(medication_id)
        if med is None:
            return []
        names = [med.indication]
        for rule in med.indication_rules:
            if rule.indication not in names:
                names.append(rule.indication)
        return names

    @staticmethod
    def available_medications() -> List[dict]:
        return [
            {
                "id": key,
                "name": med.name,
                "dose_per_kg": med.dose_per_kg,
                "max_dose": med.max_dose,
                "unit": med.unit,
                "route": med.route,
                "indications": DosingCalculator.indications_for(key),
            }
            for key, med in MEDICATION_LIBRARY.SPECS.items()
        ]
