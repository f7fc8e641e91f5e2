"""
RDInfo: Patient Profile Store
=============================
Holds the patient of one session and the values derived from it.
Every update clamps its input, re-estimates the weight, re-runs the risk
analysis and swaps in a fresh DerivedValues object in one assignment.
"""

import copy
import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, Optional

from .constants import Gender, QuickProfile, AGE_CONSTANTS, PATIENT_LIMITS
from .models import PatientProfile, Vitals, DerivedValues, DataTypeError
from .calculator import PatientCalculator
from .safety import RiskAnalyzer

logger = logging.getLogger(__name__)

def _clamp(value, low, high, name: str):
    clamped = max(low, min(value, high))
    if clamped != value:
        logger.debug(f"Clamped {name} from {value} to {clamped}")
    return clamped

def _require_number(name: str, value, integer: bool = False):
    allowed = int if integer else (int, float)
    if isinstance(value, bool) or not isinstance(value, allowed):
        raise DataTypeError(f"'{name}' must be {'an integer' if integer else 'numeric'}, got {type(value)}")
    return value

def _string_list(name: str, values: Optional[Iterable[str]]) -> list:
    if values is None:
        return []
    if isinstance(values, str):
        raise DataTypeError(f"'{name}' must be a list of strings, got a single string")
    items = list(values)
    for item in items:
        if not isinstance(item, str):
            raise DataTypeError(f"'{name}' entries must be strings, got {type(item)}")
    return [item.strip() for item in items if item.strip()]

class ProfileStore:
    """
    One active patient. Create one store per user session; nothing here is
    shared between sessions and nothing is written to disk.
    """

    def __init__(self):
        self._profile = PatientProfile()
        self._settings: Dict[str, Any] = {}
        self._derived = self._derive(self._profile)

    # --- Derivation ---

    @staticmethod
    def _derive(profile: PatientProfile) -> DerivedValues:
        years = profile.age_years
        total_months = profile.total_age_months

        estimated = PatientCalculator.estimate_weight(
            years, profile.age_months, profile.gender,
            profile.is_pregnant, profile.week_of_pregnancy
        )
        if profile.is_manual_weight and profile.weight_kg:
            effective = profile.weight_kg
        else:
            effective = estimated

        # Risk rules read the age classes, so build them first
        base = DerivedValues(
            total_age_months=total_months,
            effective_weight=effective,
            estimated_weight=estimated,
            is_infant=total_months < AGE_CONSTANTS.INFANT_MAX_MONTHS,
            is_child=AGE_CONSTANTS.INFANT_MAX_MONTHS <= total_months < AGE_CONSTANTS.ADULT_MIN_YEARS * 12,
            is_adolescent=AGE_CONSTANTS.ADOLESCENT_MIN_YEARS <= years < AGE_CONSTANTS.ADULT_MIN_YEARS,
            is_adult=years >= AGE_CONSTANTS.ADULT_MIN_YEARS,
            is_geriatric=years >= AGE_CONSTANTS.GERIATRIC_MIN_YEARS,
            age_category=PatientCalculator.age_category(years, profile.age_months)
        )
        risks = RiskAnalyzer.compute_risk_factors(profile, base)
        return replace(base, risk_factors=tuple(risks))

    def _recompute(self) -> None:
        derived = self._derive(self._profile)
        self._derived = derived   # Single assignment: readers never see a half-built state
        logger.debug(
            f"Recomputed: {derived.total_age_months}m, {derived.effective_weight}kg, "
            f"{len(derived.risk_factors)} risk factor(s)"
        )

    # --- Transitions ---

    def update_age(self, years: int, months: int = 0) -> None:
        years = _require_number("years", years, integer=True)
        months = _require_number("months", months, integer=True)
        self._profile.age_years = _clamp(years, PATIENT_LIMITS.MIN_AGE_YEARS, PATIENT_LIMITS.MAX_AGE_YEARS, "age_years")
        self._profile.age_months = _clamp(months, PATIENT_LIMITS.MIN_AGE_MONTHS, PATIENT_LIMITS.MAX_AGE_MONTHS, "age_months")
        self._recompute()

    def update_weight(self, weight_kg: Optional[float], is_manual: bool = True) -> None:
        """None (or is_manual=False) hands the weight back to the estimator."""
        if weight_kg is None or not is_manual:
            self._profile.weight_kg = None
            self._profile.is_manual_weight = False
        else:
            weight_kg = _require_number("weight_kg", weight_kg)
            self._profile.weight_kg = float(_clamp(
                weight_kg, PATIENT_LIMITS.MIN_WEIGHT_KG, PATIENT_LIMITS.MAX_WEIGHT_KG, "weight_kg"
            ))
            self._profile.is_manual_weight = True
        self._recompute()

    def update_gender(self, gender: Gender) -> None:
        if not isinstance(gender, Gender):
            raise DataTypeError(f"'gender' must be a Gender, got {type(gender)}")
        self._profile.gender = gender
        if gender == Gender.MALE:
            self._profile.is_pregnant = None
            self._profile.week_of_pregnancy = None
        self._recompute()

    def update_vitals(self, vitals: Optional[Vitals]) -> None:
        if vitals is not None and not isinstance(vitals, Vitals):
            raise DataTypeError(f"'vitals' must be Vitals, got {type(vitals)}")
        self._profile.vitals = copy.deepcopy(vitals)
        self._recompute()

    def update_medical_data(self, allergies: Optional[Iterable[str]] = None,
                            medications: Optional[Iterable[str]] = None,
                            medical_history: Optional[Iterable[str]] = None) -> None:
        """Replaces the given lists; a list left as None keeps its current value."""
        if allergies is not None:
            self._profile.allergies = _string_list("allergies", allergies)
        if medications is not None:
            self._profile.medications = _string_list("medications", medications)
        if medical_history is not None:
            self._profile.medical_history = _string_list("medical_history", medical_history)
        self._recompute()

    def update_pregnancy(self, is_pregnant: Optional[bool], week: Optional[int] = None) -> None:
        if self._profile.gender == Gender.MALE:
            logger.debug("Ignored pregnancy update for male patient")
            self._recompute()
            return
        if is_pregnant:
            self._profile.is_pregnant = True
            if week is None:
                self._profile.week_of_pregnancy = None
            else:
                week = _require_number("week", week, integer=True)
                self._profile.week_of_pregnancy = _clamp(
                    week, PATIENT_LIMITS.MIN_PREGNANCY_WEEK, PATIENT_LIMITS.MAX_PREGNANCY_WEEK, "week_of_pregnancy"
                )
        else:
            self._profile.is_pregnant = is_pregnant   # False or None (not asked)
            self._profile.week_of_pregnancy = None
        self._recompute()

    def set_quick_profile(self, kind: QuickProfile) -> None:
        """Starts a fresh patient from a preset age; weight is always estimated."""
        kind = QuickProfile(kind)
        presets = {
            QuickProfile.INFANT: (0, 6),
            QuickProfile.CHILD: (5, 0),
            QuickProfile.ADULT: (35, 0),
        }
        years, months = presets[kind]
        self._profile = PatientProfile(age_years=years, age_months=months)
        self._recompute()

    def reset_to_defaults(self) -> None:
        self._profile = PatientProfile()
        self._recompute()

    # --- Accessors ---

    def get_current_profile(self) -> PatientProfile:
        """A copy; mutating it does not touch the store."""
        return copy.deepcopy(self._profile)

    def get_derived_values(self) -> DerivedValues:
        return self._derived

    def patient_summary(self) -> str:
        p = self._profile
        d = self._derived
        age = f"{p.age_years} years"
        if p.age_months > 0:
            age += f" {p.age_months} months"
        weight = f"{d.effective_weight:.1f} kg"
        if not (p.is_manual_weight and p.weight_kg):
            weight += " (estimated)"
        return f"{age}, {weight}, {p.gender.value}"

    # --- Settings pass-through (stored, never interpreted) ---

    def import_settings(self, settings: Dict[str, Any]) -> None:
        if not isinstance(settings, dict):
            raise DataTypeError(f"'settings' must be a dict, got {type(settings)}")
        self._settings = copy.deepcopy(settings)

    def export_settings(self) -> Dict[str, Any]:
        return copy.deepcopy(self._settings)
