"""
RDInfo: Patient Calculator
==========================
Age-banded estimates: body weight, vital-sign reference ranges,
fluid and caloric requirements. Every function here is pure.
"""

from typing import Optional

from .constants import (
    Gender,
    AGE_CONSTANTS,
    PATIENT_LIMITS,
    FLUID_CONSTANTS
)
from .models import VitalRange, DataTypeError

def _require_int(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise DataTypeError(f"'{name}' must be an integer, got {type(value)}")
    return value

class PatientCalculator:
    """
    Translates age (and sex) into the reference values a crew needs
    before a weight has been measured.
    """

    @staticmethod
    def estimate_weight(age_years: int, age_months: int = 0,
                        gender: Gender = Gender.UNKNOWN,
                        is_pregnant: Optional[bool] = False,
                        week_of_pregnancy: Optional[int] = None) -> float:
        """
        Estimated body weight (kg).

        0-12 months: WHO-style table (3.5 kg at birth to 11 kg at 12 months)
        1-5 years:   2 x age + 8
        6-12 years:  2.5 x age + 10
        13-17 years: 45 + 5 x (age - 13)
        Adults:      sex reference weight; pregnant non-male patients 65 + 0.5 x week
        """
        age_years = _require_int("age_years", age_years)
        age_months = _require_int("age_months", age_months)
        total_months = max(age_years * 12 + age_months, 0)

        if total_months <= 12:
            return AGE_CONSTANTS.INFANT_WEIGHT_TABLE[total_months]
        if age_years <= 5:
            return 2.0 * age_years + 8.0
        if age_years <= 12:
            return 2.5 * age_years + 10.0
        if age_years <= 17:
            return 45.0 + 5.0 * (age_years - 13)

        # A pregnant patient of unknown sex is weighed as a pregnant woman
        if gender != Gender.MALE and is_pregnant:
            week = week_of_pregnancy or PATIENT_LIMITS.DEFAULT_PREGNANCY_WEEK
            return 65.0 + 0.5 * week

        below_65, from_65 = AGE_CONSTANTS.ADULT_WEIGHT.get(gender, AGE_CONSTANTS.ADULT_WEIGHT[Gender.UNKNOWN])
        return from_65 if age_years >= AGE_CONSTANTS.GERIATRIC_MIN_YEARS else below_65

    @staticmethod
    def estimate_height_cm(age_years: int, gender: Gender = Gender.UNKNOWN) -> float:
        """Reference adult height, used only for the adult BMI screen."""
        below_65, from_65 = AGE_CONSTANTS.ADULT_HEIGHT.get(gender, AGE_CONSTANTS.ADULT_HEIGHT[Gender.UNKNOWN])
        return from_65 if age_years >= AGE_CONSTANTS.GERIATRIC_MIN_YEARS else below_65

    @staticmethod
    def _calculate_fluid_requirement(weight_kg: float) -> float:
        """
        Holliday-Segar as an average rate (ml/kg/day):
        first 10 kg 100 ml/kg, next 10 kg 50 ml/kg, above 20 kg 20 ml/kg.
        """
        if weight_kg <= FLUID_CONSTANTS.FIRST_STEP_KG:
            rate = FLUID_CONSTANTS.BASE_RATE
        elif weight_kg <= FLUID_CONSTANTS.SECOND_STEP_KG:
            rate = FLUID_CONSTANTS.BASE_RATE - (weight_kg - FLUID_CONSTANTS.FIRST_STEP_KG) * FLUID_CONSTANTS.SECOND_STEP_SLOPE
        else:
            rate = FLUID_CONSTANTS.THIRD_STEP_BASE - (weight_kg - FLUID_CONSTANTS.SECOND_STEP_KG) * FLUID_CONSTANTS.THIRD_STEP_SLOPE
        return max(rate, FLUID_CONSTANTS.FLOOR_RATE)

    @staticmethod
    def vital_ranges(age_years: int, age_months: int, weight_kg: float) -> VitalRange:
        """
        Normal values for the patient's age band.
        Bands: neonate (<= 1 month), infant (<= 12 months), toddler (1-3 y),
        school child (4-12 y), adolescent (13-17 y), adult (18-65 y), geriatric (> 65 y).
        """
        age_years = _require_int("age_years", age_years)
        age_months = _require_int("age_months", age_months)
        if isinstance(weight_kg, bool) or not isinstance(weight_kg, (int, float)):
            raise DataTypeError(f"'weight_kg' must be numeric, got {type(weight_kg)}")

        total_months = age_years * 12 + age_months
        fluid = PatientCalculator._calculate_fluid_requirement(weight_kg)

        if total_months <= 1:
            return VitalRange(
                band="neonate",
                heart_rate_min=120, heart_rate_max=160,
                respiratory_rate_min=30, respiratory_rate_max=60,
                systolic_bp_min=65, systolic_bp_max=95,
                tidal_volume_ml_kg=6.0, blood_volume_ml_kg=80.0,
                hemoglobin_min=14.0, hemoglobin_max=20.0,
                fluid_ml_kg_day=100.0, calories_kcal_kg_day=110.0,
                weight_kg=weight_kg
            )
        if total_months <= 12:
            return VitalRange(
                band="infant",
                heart_rate_min=100, heart_rate_max=150,
                respiratory_rate_min=25, respiratory_rate_max=50,
                systolic_bp_min=70, systolic_bp_max=100,
                tidal_volume_ml_kg=7.0, blood_volume_ml_kg=75.0,
                hemoglobin_min=10.0, hemoglobin_max=14.0,
                fluid_ml_kg_day=100.0, calories_kcal_kg_day=100.0,
                weight_kg=weight_kg
            )
        if age_years <= 3:
            return VitalRange(
                band="toddler",
                heart_rate_min=90, heart_rate_max=130,
                respiratory_rate_min=20, respiratory_rate_max=40,
                systolic_bp_min=80, systolic_bp_max=110,
                tidal_volume_ml_kg=8.0, blood_volume_ml_kg=75.0,
                hemoglobin_min=11.0, hemoglobin_max=13.0,
                fluid_ml_kg_day=fluid, calories_kcal_kg_day=90.0,
                weight_kg=weight_kg
            )
        if age_years <= 12:
            return VitalRange(
                band="school_child",
                heart_rate_min=70, heart_rate_max=120,
                respiratory_rate_min=15, respiratory_rate_max=30,
                systolic_bp_min=90, systolic_bp_max=120,
                tidal_volume_ml_kg=8.0, blood_volume_ml_kg=70.0,
                hemoglobin_min=11.5, hemoglobin_max=15.5,
                fluid_ml_kg_day=fluid,
                calories_kcal_kg_day=80.0 if age_years <= 6 else 70.0,
                weight_kg=weight_kg
            )
        if age_years <= 17:
            return VitalRange(
                band="adolescent",
                heart_rate_min=60, heart_rate_max=100,
                respiratory_rate_min=12, respiratory_rate_max=25,
                systolic_bp_min=100, systolic_bp_max=130,
                tidal_volume_ml_kg=8.0, blood_volume_ml_kg=70.0,
                hemoglobin_min=12.0, hemoglobin_max=16.0,
                fluid_ml_kg_day=fluid, calories_kcal_kg_day=50.0,
                weight_kg=weight_kg
            )
        if age_years <= 65:
            return VitalRange(
                band="adult",
                heart_rate_min=60, heart_rate_max=100,
                respiratory_rate_min=12, respiratory_rate_max=20,
                systolic_bp_min=100, systolic_bp_max=140,
                tidal_volume_ml_kg=7.0, blood_volume_ml_kg=70.0,
                hemoglobin_min=12.0, hemoglobin_max=16.0,
                fluid_ml_kg_day=FLUID_CONSTANTS.ADULT_RATE, calories_kcal_kg_day=25.0,
                weight_kg=weight_kg
            )
        return VitalRange(
            band="geriatric",
            heart_rate_min=60, heart_rate_max=90,
            respiratory_rate_min=12, respiratory_rate_max=20,
            systolic_bp_min=110, systolic_bp_max=160,
            tidal_volume_ml_kg=6.0, blood_volume_ml_kg=65.0,
            hemoglobin_min=11.0, hemoglobin_max=15.0,
            fluid_ml_kg_day=FLUID_CONSTANTS.ADULT_RATE, calories_kcal_kg_day=20.0,
            weight_kg=weight_kg
        )

    @staticmethod
    def age_category(age_years: int, age_months: int) -> str:
        """Display label for the age band, e.g. 'Infant (6 months)'."""
        total_months = age_years * 12 + age_months
        if total_months <= 1:
            return f"Newborn ({total_months} months)"
        if total_months <= 12:
            return f"Infant ({total_months} months)"
        if age_years <= 3:
            return f"Toddler ({age_years} y {age_months} m)"
        if age_years <= 12:
            return f"School child ({age_years} y)"
        if age_years <= 17:
            return f"Adolescent ({age_years} y)"
        if age_years <= 65:
            return f"Adult ({age_years} y)"
        return f"Geriatric ({age_years} y)"
