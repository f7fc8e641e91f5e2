import unittest
from rdinfo import (
    RiskAnalyzer, PatientProfile, Vitals, DerivedValues, Gender, Severity
)

def make_derived(profile: PatientProfile, weight: float = 70.0) -> DerivedValues:
    """Age classes for the profile, with a fixed effective weight."""
    months = profile.total_age_months
    years = profile.age_years
    return DerivedValues(
        total_age_months=months,
        effective_weight=weight,
        estimated_weight=weight,
        is_infant=months < 12,
        is_child=12 <= months < 216,
        is_adolescent=13 <= years < 18,
        is_adult=years >= 18,
        is_geriatric=years >= 65,
        age_category="test"
    )

class TestRiskAnalyzer(unittest.TestCase):

    def setUp(self):
        # Healthy 35-year-old, BMI ~24
        self.adult = PatientProfile(age_years=35)

    def ids(self, profile, weight=70.0):
        return [r.id for r in RiskAnalyzer.compute_risk_factors(profile, make_derived(profile, weight))]

    def test_01_healthy_adult_has_no_risks(self):
        self.assertEqual(self.ids(self.adult), [])

    def test_02_severe_hypoxia_is_the_only_critical(self):
        """SpO2 88% -> exactly one CRITICAL factor"""
        self.adult.vitals = Vitals(oxygen_saturation=88)
        risks = RiskAnalyzer.compute_risk_factors(self.adult, make_derived(self.adult))
        critical = [r for r in risks if r.severity == Severity.CRITICAL]
        self.assertEqual(len(critical), 1)
        self.assertEqual(critical[0].id, "spo2_critical")

    def test_03_mild_hypoxia(self):
        self.adult.vitals = Vitals(oxygen_saturation=92)
        risks = RiskAnalyzer.compute_risk_factors(self.adult, make_derived(self.adult))
        self.assertEqual([(r.id, r.severity) for r in risks], [("spo2_low", Severity.HIGH)])

        self.adult.vitals = Vitals(oxygen_saturation=95)
        self.assertEqual(self.ids(self.adult), [])

    def test_04_blood_pressure(self):
        self.adult.vitals = Vitals(systolic_bp=85)
        self.assertEqual(self.ids(self.adult), ["hypotension"])
        self.adult.vitals = Vitals(systolic_bp=190)
        self.assertEqual(self.ids(self.adult), ["hypertension"])
        self.adult.vitals = Vitals(systolic_bp=120)
        self.assertEqual(self.ids(self.adult), [])

    def test_05_heart_rate_by_age_band(self):
        self.adult.vitals = Vitals(heart_rate=50)
        self.assertEqual(self.ids(self.adult), ["bradycardia"])
        self.adult.vitals = Vitals(heart_rate=120)
        self.assertEqual(self.ids(self.adult), ["tachycardia"])

        # 145/min is normal at 2 years but fast at 4 years
        toddler = PatientProfile(age_years=2, vitals=Vitals(heart_rate=145))
        self.assertEqual(self.ids(toddler, 12.0), [])
        preschooler = PatientProfile(age_years=4, vitals=Vitals(heart_rate=145))
        self.assertEqual(self.ids(preschooler, 16.0), ["tachycardia"])

    def test_06_pregnancy_stages(self):
        pregnant = PatientProfile(age_years=28, gender=Gender.FEMALE, is_pregnant=True, week_of_pregnancy=10)
        self.assertEqual(self.ids(pregnant, 70.0), ["pregnancy_early"])
        pregnant.week_of_pregnancy = 40
        # 85 kg would read as obesity; BMI is skipped during pregnancy
        self.assertEqual(self.ids(pregnant, 85.0), ["pregnancy_term"])
        pregnant.week_of_pregnancy = 20
        self.assertEqual(self.ids(pregnant, 75.0), [])

    def test_07_bmi_bounds(self):
        male = PatientProfile(age_years=40, gender=Gender.MALE)
        self.assertEqual(self.ids(male, 50.0), ["underweight"])
        self.assertEqual(self.ids(male, 110.0), ["obesity"])
        # Children are never BMI-screened
        child = PatientProfile(age_years=8)
        self.assertEqual(self.ids(child, 80.0), [])

    def test_08_rule_order_is_stable(self):
        """Infant + hypoxia + allergy come out in rule order, not severity order"""
        infant = PatientProfile(
            age_years=0, age_months=6,
            vitals=Vitals(oxygen_saturation=85),
            allergies=["Penicillin", "Latex"]
        )
        risks = RiskAnalyzer.compute_risk_factors(infant, make_derived(infant, 8.0))
        self.assertEqual([r.id for r in risks], ["infant_dehydration", "spo2_critical", "allergies"])
        self.assertIn("2 known allergies", risks[-1].description)

    def test_09_geriatric(self):
        elderly = PatientProfile(age_years=80)
        self.assertEqual(self.ids(elderly, 70.0), ["geriatric_multimorbidity"])

    def test_10_single_allergy_without_vitals(self):
        self.adult.allergies = ["Latex"]
        risks = RiskAnalyzer.compute_risk_factors(self.adult, make_derived(self.adult))
        self.assertEqual(len(risks), 1)
        self.assertIn("1 known allergy", risks[0].description)

if __name__ == '__main__':
    unittest.main()
