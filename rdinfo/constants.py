from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Tuple

VERSION = "1.0.0"

class Gender(Enum):
    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"

class Severity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

class DosageStatus(Enum):
    CALCULATED = "calculated"
    UNKNOWN_MEDICATION = "unknown_medication"   # Never a real zero-dose recommendation
    UNKNOWN_INDICATION = "unknown_indication"
    NO_RULE_FOR_AGE = "no_rule_for_age"         # Indication exists, but not for this age group

class AgeGroup(Enum):
    """Dosing age groups. A rule without an age group applies to all ages."""
    NEONATE = "neonate"         # 0 months
    INFANT = "infant"           # 1-12 months
    TODDLER = "toddler"         # 1-2 years
    CHILD = "child"             # 3-11 years
    ADOLESCENT = "adolescent"   # 12-17 years
    ADULT = "adult"             # 18-64 years
    GERIATRIC = "geriatric"     # 65+ years

class QuickProfile(Enum):
    """Preset patients for the three quick-select buttons."""
    INFANT = "infant"
    CHILD = "child"
    ADULT = "adult"

class PATIENT_LIMITS:
    # Input clamping bounds (out-of-range input is clamped, never rejected)
    MIN_AGE_YEARS = 0
    MAX_AGE_YEARS = 120
    MIN_AGE_MONTHS = 0
    MAX_AGE_MONTHS = 11
    MIN_WEIGHT_KG = 0.5
    MAX_WEIGHT_KG = 300.0
    MIN_PREGNANCY_WEEK = 1
    MAX_PREGNANCY_WEEK = 42
    DEFAULT_PREGNANCY_WEEK = 20   # Used by the estimator when the week is unknown

class AGE_CONSTANTS:
    # Age class boundaries
    INFANT_MAX_MONTHS = 12        # < 12 months
    ADULT_MIN_YEARS = 18
    ADOLESCENT_MIN_YEARS = 13
    GERIATRIC_MIN_YEARS = 65

    # WHO-style infant weights (kg) for months 0..12
    INFANT_WEIGHT_TABLE = (3.5, 4.5, 5.5, 6.5, 7.0, 7.5, 8.0, 8.5, 9.0, 9.5, 10.0, 10.5, 11.0)

    # Adult reference weights (kg): (age < 65, age >= 65)
    ADULT_WEIGHT = {
        Gender.MALE: (75.0, 72.0),
        Gender.FEMALE: (65.0, 62.0),
        Gender.UNKNOWN: (70.0, 70.0),
    }

    # Adult reference heights (cm) for BMI: (age < 65, age >= 65)
    ADULT_HEIGHT = {
        Gender.MALE: (178.0, 175.0),
        Gender.FEMALE: (165.0, 162.0),
        Gender.UNKNOWN: (170.0, 168.0),
    }

    # Age (years, exclusive upper bound): (HR min, HR max) for the tachy/brady screen
    HR_LIMITS = ((1, (100, 160)), (3, (90, 150)), (6, (80, 140)),
                 (13, (70, 120)), (18, (60, 100)), (None, (60, 100)))

class SESSION_LIMITS:
    # Idle sessions are purged; patient data never outlives the shift
    IDLE_TIMEOUT_SECONDS = 4 * 60 * 60

class RISK_THRESHOLDS:
    EARLY_PREGNANCY_WEEK = 12     # week < 12
    TERM_PREGNANCY_WEEK = 37      # week > 37
    BMI_UNDERWEIGHT = 18.5
    BMI_OBESE = 30.0
    SBP_HYPOTENSION = 90
    SBP_HYPERTENSION = 180
    SPO2_CRITICAL = 90            # < 90 = severe hypoxia
    SPO2_LOW = 94                 # 90-94 = hypoxia

class FLUID_CONSTANTS:
    # Holliday-Segar expressed as an average ml/kg/day rate
    FIRST_STEP_KG = 10.0
    SECOND_STEP_KG = 20.0
    BASE_RATE = 100.0
    SECOND_STEP_SLOPE = 2.5
    THIRD_STEP_BASE = 75.0
    THIRD_STEP_SLOPE = 1.25
    FLOOR_RATE = 20.0
    ADULT_RATE = 30.0

@dataclass(frozen=True)
class DoseRule:
    """
    Dosing for one indication and age group.
    Exactly one of dose_per_kg and fixed_dose is set; max_dose None = the medication's cap.
    """
    indication: str
    route: str
    age_group: Optional[AgeGroup] = None
    dose_per_kg: Optional[float] = None
    fixed_dose: Optional[float] = None
    max_dose: Optional[float] = None
    min_dose: Optional[float] = None
    preparation: str = ""

@dataclass(frozen=True)
class MedicationProperties:
    name: str
    dose_per_kg: float
    max_dose: float               # Absolute cap per administration
    unit: str
    route: str
    min_dose: Optional[float] = None
    concentration_per_ml: Optional[float] = None   # None = dose is already a volume
    min_age_months: Optional[int] = None
    # (age in years, exclusive upper bound, dose per kg) checked before dose_per_kg
    age_dose_per_kg: Tuple[Tuple[int, float], ...] = ()
    aliases: Tuple[str, ...] = field(default_factory=tuple)
    # The per-kg fields above describe the default indication
    indication: str = ""
    preparation: str = ""
    indication_rules: Tuple[DoseRule, ...] = ()

class MEDICATION_LIBRARY:
    """
    The emergency drug table.
    Per-kg formula, hard cap and ampoule concentration for each medication,
    plus optional rules for further indications.
    """
    SPECS = {
        "adrenaline": MedicationProperties(
            name="Adrenaline",
            dose_per_kg=0.01, max_dose=1.0, unit="mg", route="i.v./i.o.",
            concentration_per_ml=1.0,   # 1:1000
            aliases=("adrenalin", "epinephrine", "epinephrin"),
            indication="Resuscitation", preparation="undiluted (1:1000)",
            indication_rules=(
                DoseRule("Anaphylaxis", "i.m.", AgeGroup.CHILD, fixed_dose=0.15,
                         preparation="undiluted, lateral thigh"),
                DoseRule("Anaphylaxis", "i.m.", AgeGroup.ADOLESCENT, fixed_dose=0.3,
                         preparation="undiluted, lateral thigh"),
                DoseRule("Anaphylaxis", "i.m.", AgeGroup.ADULT, fixed_dose=0.5,
                         preparation="undiluted, lateral thigh"),
            )
        ),
        "atropine": MedicationProperties(
            name="Atropine",
            dose_per_kg=0.02, max_dose=1.0, min_dose=0.1, unit="mg", route="i.v.",
            concentration_per_ml=0.5,
            aliases=("atropin",),
            indication="Bradycardia", preparation="inject slowly"
        ),
        "morphine": MedicationProperties(
            name="Morphine",
            dose_per_kg=0.1, max_dose=10.0, unit="mg", route="i.v.",
            concentration_per_ml=10.0,
            min_age_months=12,
            aliases=("morphin",),
            indication="Analgesia", preparation="dilute to 1 mg/ml, titrate"
        ),
        "diazepam": MedicationProperties(
            name="Diazepam",
            dose_per_kg=0.3, max_dose=10.0, unit="mg", route="i.v./rectal",
            concentration_per_ml=5.0,
            indication="Seizure"
        ),
        "salbutamol": MedicationProperties(
            name="Salbutamol",
            dose_per_kg=2.5, max_dose=5000.0, unit="µg", route="inhalation",
            concentration_per_ml=5000.0,
            indication="Bronchospasm", preparation="nebulise with 2-3 ml NaCl 0.9%"
        ),
        "paracetamol": MedicationProperties(
            name="Paracetamol",
            dose_per_kg=15.0, max_dose=1000.0, unit="mg", route="i.v.",
            concentration_per_ml=10.0,
            indication="Fever and pain", preparation="infuse over 15 min"
        ),
        "glucose_40": MedicationProperties(
            name="Glucose 40%",
            dose_per_kg=1.0, max_dose=50.0, unit="ml", route="i.v.",
            age_dose_per_kg=((1, 2.0),),   # Infants: 2 ml/kg
            aliases=("glucose", "glukose", "glucose40"),
            indication="Hypoglycaemia", preparation="via large-bore access"
        ),
    }

    @staticmethod
    def get(medication_id: str) -> Optional[MedicationProperties]:
        key = (medication_id or "").strip().lower()
        if key in MEDICATION_LIBRARY.SPECS:
            return MEDICATION_LIBRARY.SPECS[key]
        for med in MEDICATION_LIBRARY.SPECS.values():
            if key in med.aliases:
                return med
        return None

    @staticmethod
    def canonical_id(medication_id: str) -> Optional[str]:
        med = MEDICATION_LIBRARY.get(medication_id)
        if med is None:
            return None
        for key, candidate in MEDICATION_LIBRARY.SPECS.items():
            if candidate is med:
                return key
        return None
