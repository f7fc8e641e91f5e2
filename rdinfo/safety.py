# safety.py
from typing import List

from .constants import Severity, AGE_CONSTANTS, RISK_THRESHOLDS
from .models import PatientProfile, DerivedValues, RiskFactor
from .calculator import PatientCalculator

def _heart_rate_limits(age_years: int):
    for upper_years, limits in AGE_CONSTANTS.HR_LIMITS:
        if upper_years is None or age_years < upper_years:
            return limits
    return AGE_CONSTANTS.HR_LIMITS[-1][1]

class RiskAnalyzer:
    @staticmethod
    def compute_risk_factors(profile: PatientProfile, derived: DerivedValues) -> List[RiskFactor]:
        """
        Flags risk conditions in a fixed rule order.
        Every rule runs; a missing vital skips only its own rule.
        """
        risks: List[RiskFactor] = []

        # 1. Age extremes
        if derived.is_infant:
            risks.append(RiskFactor(
                id="infant_dehydration",
                name="Infant",
                description="High risk of dehydration and hypothermia",
                severity=Severity.MEDIUM
            ))
        if derived.is_geriatric:
            risks.append(RiskFactor(
                id="geriatric_multimorbidity",
                name="Geriatric patient",
                description="Multimorbidity and polypharmacy likely",
                severity=Severity.MEDIUM
            ))

        # 2. Pregnancy stage
        week = profile.week_of_pregnancy
        if profile.is_pregnant and week is not None:
            if week < RISK_THRESHOLDS.EARLY_PREGNANCY_WEEK:
                risks.append(RiskFactor(
                    id="pregnancy_early",
                    name="Early pregnancy",
                    description=f"Week {week}: teratogenic risk, check every drug",
                    severity=Severity.HIGH
                ))
            elif week > RISK_THRESHOLDS.TERM_PREGNANCY_WEEK:
                risks.append(RiskFactor(
                    id="pregnancy_term",
                    name="Term pregnancy",
                    description=f"Week {week}: imminent delivery possible, aortocaval compression",
                    severity=Severity.HIGH
                ))

        # 3. BMI (adults only; pregnancy weight gain would read as obesity)
        if derived.is_adult and not profile.is_pregnant:
            height_m = PatientCalculator.estimate_height_cm(profile.age_years, profile.gender) / 100.0
            bmi = derived.effective_weight / (height_m ** 2)
            if bmi < RISK_THRESHOLDS.BMI_UNDERWEIGHT:
                risks.append(RiskFactor(
                    id="underweight",
                    name="Underweight",
                    description=f"Estimated BMI {bmi:.1f}",
                    severity=Severity.MEDIUM
                ))
            elif bmi > RISK_THRESHOLDS.BMI_OBESE:
                risks.append(RiskFactor(
                    id="obesity",
                    name="Obesity",
                    description=f"Estimated BMI {bmi:.1f}: difficult airway and i.v. access",
                    severity=Severity.MEDIUM
                ))

        vitals = profile.vitals
        if vitals is None:
            return RiskAnalyzer._append_allergies(risks, profile)

        # 4. Blood pressure
        if vitals.systolic_bp is not None:
            if vitals.systolic_bp < RISK_THRESHOLDS.SBP_HYPOTENSION:
                risks.append(RiskFactor(
                    id="hypotension",
                    name="Hypotension",
                    description=f"Systolic BP {vitals.systolic_bp} mmHg",
                    severity=Severity.HIGH
                ))
            elif vitals.systolic_bp > RISK_THRESHOLDS.SBP_HYPERTENSION:
                risks.append(RiskFactor(
                    id="hypertension",
                    name="Hypertension",
                    description=f"Systolic BP {vitals.systolic_bp} mmHg",
                    severity=Severity.HIGH
                ))

        # 5. Heart rate against the age band
        if vitals.heart_rate is not None:
            hr_min, hr_max = _heart_rate_limits(profile.age_years)
            if vitals.heart_rate < hr_min:
                risks.append(RiskFactor(
                    id="bradycardia",
                    name="Bradycardia",
                    description=f"HR {vitals.heart_rate}/min (normal {hr_min}-{hr_max})",
                    severity=Severity.MEDIUM
                ))
            elif vitals.heart_rate > hr_max:
                risks.append(RiskFactor(
                    id="tachycardia",
                    name="Tachycardia",
                    description=f"HR {vitals.heart_rate}/min (normal {hr_min}-{hr_max})",
                    severity=Severity.MEDIUM
                ))

        # 6. Oxygenation
        if vitals.oxygen_saturation is not None:
            if vitals.oxygen_saturation < RISK_THRESHOLDS.SPO2_CRITICAL:
                risks.append(RiskFactor(
                    id="spo2_critical",
                    name="Severe hypoxia",
                    description=f"SpO2 {vitals.oxygen_saturation}%",
                    severity=Severity.CRITICAL
                ))
            elif vitals.oxygen_saturation <= RISK_THRESHOLDS.SPO2_LOW:
                risks.append(RiskFactor(
                    id="spo2_low",
                    name="Hypoxia",
                    description=f"SpO2 {vitals.oxygen_saturation}%",
                    severity=Severity.HIGH
                ))

        return RiskAnalyzer._append_allergies(risks, profile)

    @staticmethod
    def _append_allergies(risks: List[RiskFactor], profile: PatientProfile) -> List[RiskFactor]:
        # 7. Known allergies (always the last rule)
        if profile.allergies:
            count = len(profile.allergies)
            risks.append(RiskFactor(
                id="allergies",
                name="Known allergies",
                description=f"{count} known allerg{'y' if count == 1 else 'ies'}: {', '.join(profile.allergies)}",
                severity=Severity.MEDIUM
            ))
        return risks
