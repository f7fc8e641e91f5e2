# --- METADATA & COMPLIANCE ---
__version__ = "1.0.0"
__model_date__ = "2025-09-14"
__validation_status__ = "Clinical validation pending"

MEDICAL_DISCLAIMER = """
DECISION SUPPORT TOOL - REFERENCE VALUES ONLY
• Final responsibility: Treating crew / physician
• Always check indication, contraindications and local protocols
• Patient data lives only for the session and is never stored
"""

from .constants import Gender, Severity, DosageStatus, QuickProfile, AgeGroup, DoseRule
from .models import (
    PatientProfile,
    Vitals,
    DerivedValues,
    RiskFactor,
    VitalRange,
    DosageResult,
    DataTypeError
)
from .calculator import PatientCalculator
from .safety import RiskAnalyzer
from .dosing import DosingCalculator
from .profile import ProfileStore

estimate_weight = PatientCalculator.estimate_weight
vital_ranges = PatientCalculator.vital_ranges
compute_risk_factors = RiskAnalyzer.compute_risk_factors
calculate_dosage = DosingCalculator.calculate_dosage
