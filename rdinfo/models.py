"""
RDInfo: Data Dictionary
=======================
Defines the patient state held for one session, the values derived from it,
and the records returned by the reference and dosing lookups.

NO LOGIC is implemented here beyond type checks.
"""

from dataclasses import dataclass, field, fields
from typing import List, Optional, Tuple

from .constants import Gender, Severity, DosageStatus

class DataTypeError(TypeError):
    """Raised when inputs are wrong python types (str instead of float)."""
    pass

# --- 1. INPUT LAYER (What the crew enters) ---

@dataclass
class Vitals:
    """Snapshot of the measured vital signs. Every field is optional."""
    systolic_bp: Optional[int] = None       # mmHg
    diastolic_bp: Optional[int] = None      # mmHg
    heart_rate: Optional[int] = None        # bpm
    respiratory_rate: Optional[int] = None  # /min
    oxygen_saturation: Optional[int] = None # %
    temperature: Optional[float] = None     # °C
    blood_glucose: Optional[float] = None   # mg/dl
    consciousness: Optional[str] = None     # e.g. AVPU letter or GCS note

    def __post_init__(self):
        for f in fields(self):
            if f.name == "consciousness":
                continue
            val = getattr(self, f.name)
            if val is None:
                continue
            # bool is an int subclass but never a valid measurement
            if isinstance(val, bool) or not isinstance(val, (int, float)):
                raise DataTypeError(f"Vital '{f.name}' must be numeric, got {type(val)}")
        if self.consciousness is not None and not isinstance(self.consciousness, str):
            raise DataTypeError(f"Vital 'consciousness' must be text, got {type(self.consciousness)}")

@dataclass
class PatientProfile:
    """
    The patient as entered by the crew.
    weight_kg is None until a weight is entered manually.
    """
    age_years: int = 35
    age_months: int = 0
    weight_kg: Optional[float] = None
    is_manual_weight: bool = False
    gender: Gender = Gender.UNKNOWN

    is_pregnant: Optional[bool] = None
    week_of_pregnancy: Optional[int] = None   # Only meaningful if is_pregnant

    vitals: Optional[Vitals] = None

    allergies: List[str] = field(default_factory=list)
    medications: List[str] = field(default_factory=list)
    medical_history: List[str] = field(default_factory=list)

    @property
    def total_age_months(self) -> int:
        return self.age_years * 12 + self.age_months

# --- 2. DERIVED LAYER (Recomputed after every change) ---

@dataclass(frozen=True)
class RiskFactor:
    id: str            # Stable key, e.g. "spo2_critical"
    name: str
    description: str
    severity: Severity

@dataclass(frozen=True)
class DerivedValues:
    total_age_months: int
    effective_weight: float   # Manual weight if set, else estimated
    estimated_weight: float
    is_infant: bool
    is_child: bool
    is_adolescent: bool
    is_adult: bool
    is_geriatric: bool
    age_category: str
    risk_factors: Tuple[RiskFactor, ...] = ()

# --- 3. OUTPUT LAYER (Reference and dosing answers) ---

@dataclass(frozen=True)
class VitalRange:
    """Age-band normal values. Per-kg constants plus their totals for the given weight."""
    band: str
    heart_rate_min: int
    heart_rate_max: int
    respiratory_rate_min: int
    respiratory_rate_max: int
    systolic_bp_min: int
    systolic_bp_max: int
    tidal_volume_ml_kg: float
    blood_volume_ml_kg: float
    hemoglobin_min: float       # g/dl
    hemoglobin_max: float       # g/dl
    fluid_ml_kg_day: float
    calories_kcal_kg_day: float
    weight_kg: float

    @property
    def tidal_volume_ml(self) -> float:
        return round(self.tidal_volume_ml_kg * self.weight_kg, 1)

    @property
    def blood_volume_ml(self) -> float:
        return round(self.blood_volume_ml_kg * self.weight_kg, 1)

    @property
    def daily_fluid_ml(self) -> float:
        return round(self.fluid_ml_kg_day * self.weight_kg, 1)

    @property
    def daily_calories_kcal(self) -> float:
        return round(self.calories_kcal_kg_day * self.weight_kg, 1)

@dataclass
class DosageResult:
    """
    One dose recommendation.
    status tells a computed dose apart from an unknown medication or a missing
    indication rule; the placeholder dose of those is 0.0 and must not be displayed.
    """
    medication_id: str
    dose_amount: float
    unit: str
    formula_description: str
    max_dose_description: str
    route: str
    status: DosageStatus = DosageStatus.CALCULATED
    at_cap: bool = False            # True when the cap replaced the per-kg product
    name: str = ""
    volume_ml: Optional[float] = None
    concentration_description: str = ""
    indication: str = ""
    preparation: str = ""
    warnings: List[str] = field(default_factory=list)

    @property
    def is_known(self) -> bool:
        return self.status == DosageStatus.CALCULATED
