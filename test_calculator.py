import unittest
from rdinfo import PatientCalculator, Gender, DataTypeError

class TestWeightEstimation(unittest.TestCase):

    def test_01_infant_table(self):
        """WHO-style table: 3.5 kg at birth, 8 kg at 6 months, 11 kg at 12 months"""
        self.assertEqual(PatientCalculator.estimate_weight(0, 0), 3.5)
        self.assertEqual(PatientCalculator.estimate_weight(0, 6), 8.0)
        self.assertEqual(PatientCalculator.estimate_weight(1, 0), 11.0)

    def test_02_pediatric_formulas(self):
        """2 x age + 8, then 2.5 x age + 10, then 45 + 5 x (age - 13)"""
        self.assertEqual(PatientCalculator.estimate_weight(1, 1), 10.0)
        self.assertEqual(PatientCalculator.estimate_weight(5, 0), 18.0)
        self.assertEqual(PatientCalculator.estimate_weight(6, 0), 25.0)
        self.assertEqual(PatientCalculator.estimate_weight(12, 0), 40.0)
        self.assertEqual(PatientCalculator.estimate_weight(13, 0), 45.0)
        self.assertEqual(PatientCalculator.estimate_weight(17, 0), 65.0)

    def test_03_adult_reference_weights(self):
        self.assertEqual(PatientCalculator.estimate_weight(30, 0, Gender.MALE), 75.0)
        self.assertEqual(PatientCalculator.estimate_weight(70, 0, Gender.MALE), 72.0)
        self.assertEqual(PatientCalculator.estimate_weight(30, 0, Gender.FEMALE), 65.0)
        self.assertEqual(PatientCalculator.estimate_weight(70, 0, Gender.FEMALE), 62.0)
        self.assertEqual(PatientCalculator.estimate_weight(30, 0, Gender.UNKNOWN), 70.0)

    def test_04_pregnancy_weight(self):
        """Pregnant women: 65 + 0.5 x week, week 20 if unknown"""
        self.assertEqual(PatientCalculator.estimate_weight(30, 0, Gender.FEMALE, True, 30), 80.0)
        self.assertEqual(PatientCalculator.estimate_weight(30, 0, Gender.FEMALE, True, None), 75.0)
        # Pregnancy flag has no meaning for male patients
        self.assertEqual(PatientCalculator.estimate_weight(30, 0, Gender.MALE, True, 30), 75.0)
        # Unknown sex with a pregnancy is estimated like a pregnant woman
        self.assertEqual(PatientCalculator.estimate_weight(30, 0, Gender.UNKNOWN, True, 30), 80.0)
        self.assertEqual(PatientCalculator.estimate_weight(30, 0, Gender.UNKNOWN, False, None), 70.0)

    def test_05_weight_always_positive_and_bounded(self):
        for years in range(0, 121):
            for months in range(0, 12):
                for gender in Gender:
                    for pregnant, week in [(False, None), (True, None), (True, 42)]:
                        weight = PatientCalculator.estimate_weight(years, months, gender, pregnant, week)
                        self.assertGreater(weight, 0.0)
                        self.assertLessEqual(weight, 120.0)

    def test_06_monotonic_within_bands(self):
        infant = [PatientCalculator.estimate_weight(0, m) for m in range(0, 12)]
        infant.append(PatientCalculator.estimate_weight(1, 0))
        self.assertEqual(infant, sorted(infant))

        for band in (range(1, 6), range(6, 13), range(13, 18)):
            weights = [PatientCalculator.estimate_weight(y, 6) for y in band]
            self.assertEqual(weights, sorted(weights), f"Band {band} is not monotonic")

    def test_07_rejects_wrong_types(self):
        with self.assertRaises(DataTypeError):
            PatientCalculator.estimate_weight("5", 0)
        with self.assertRaises(DataTypeError):
            PatientCalculator.estimate_weight(5, 2.5)

class TestVitalRanges(unittest.TestCase):

    def test_01_band_selection(self):
        cases = [
            ((0, 0), "neonate"), ((0, 1), "neonate"),
            ((0, 2), "infant"), ((1, 0), "infant"),
            ((1, 1), "toddler"), ((3, 11), "toddler"),
            ((4, 0), "school_child"), ((12, 5), "school_child"),
            ((13, 0), "adolescent"), ((17, 11), "adolescent"),
            ((18, 0), "adult"), ((65, 0), "adult"),
            ((66, 0), "geriatric"), ((120, 11), "geriatric"),
        ]
        for (years, months), band in cases:
            ranges = PatientCalculator.vital_ranges(years, months, 20.0)
            self.assertEqual(ranges.band, band, f"{years}y {months}m")

    def test_02_neonate_constants(self):
        r = PatientCalculator.vital_ranges(0, 0, 3.5)
        self.assertEqual((r.heart_rate_min, r.heart_rate_max), (120, 160))
        self.assertEqual((r.respiratory_rate_min, r.respiratory_rate_max), (30, 60))
        self.assertEqual((r.systolic_bp_min, r.systolic_bp_max), (65, 95))
        self.assertEqual(r.blood_volume_ml_kg, 80.0)
        self.assertEqual(r.calories_kcal_kg_day, 110.0)

    def test_03_heart_rate_ranges_shift_down_with_age(self):
        ages = [(0, 0), (0, 6), (2, 0), (8, 0), (15, 0), (40, 0), (80, 0)]
        ranges = [PatientCalculator.vital_ranges(y, m, 20.0) for y, m in ages]
        for r in ranges:
            self.assertLess(r.heart_rate_min, r.heart_rate_max)
        mins = [r.heart_rate_min for r in ranges]
        maxs = [r.heart_rate_max for r in ranges]
        self.assertEqual(mins, sorted(mins, reverse=True))
        self.assertEqual(maxs, sorted(maxs, reverse=True))
        # Neonate and adult bands do not overlap
        self.assertLess(ranges[5].heart_rate_max, ranges[0].heart_rate_min)

    def test_04_stepped_fluid_requirement(self):
        """100 ml/kg up to 10 kg, tapering to a 20 ml/kg floor"""
        self.assertEqual(PatientCalculator.vital_ranges(2, 0, 10.0).fluid_ml_kg_day, 100.0)
        self.assertEqual(PatientCalculator.vital_ranges(2, 0, 14.0).fluid_ml_kg_day, 90.0)
        self.assertEqual(PatientCalculator.vital_ranges(8, 0, 30.0).fluid_ml_kg_day, 62.5)
        self.assertEqual(PatientCalculator.vital_ranges(16, 0, 80.0).fluid_ml_kg_day, 20.0)
        self.assertEqual(PatientCalculator.vital_ranges(40, 0, 70.0).fluid_ml_kg_day, 30.0)

    def test_05_school_child_calories(self):
        self.assertEqual(PatientCalculator.vital_ranges(6, 0, 25.0).calories_kcal_kg_day, 80.0)
        self.assertEqual(PatientCalculator.vital_ranges(7, 0, 27.5).calories_kcal_kg_day, 70.0)

    def test_06_totals_for_weight(self):
        r = PatientCalculator.vital_ranges(0, 6, 8.0)
        self.assertEqual(r.blood_volume_ml, 600.0)
        self.assertEqual(r.tidal_volume_ml, 56.0)
        self.assertEqual(r.daily_fluid_ml, 800.0)
        self.assertEqual(r.daily_calories_kcal, 800.0)

    def test_07_age_category_labels(self):
        self.assertEqual(PatientCalculator.age_category(0, 6), "Infant (6 months)")
        self.assertEqual(PatientCalculator.age_category(2, 3), "Toddler (2 y 3 m)")
        self.assertEqual(PatientCalculator.age_category(70, 0), "Geriatric (70 y)")

if __name__ == '__main__':
    unittest.main()
