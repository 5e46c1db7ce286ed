from __future__ import annotations

import unittest

from policy.quality import PREMIUM_SUPPLIERS, QualityTier, classify, normalize_supplier


class TestClassify(unittest.TestCase):
    def test_original_marker_anywhere_in_text(self) -> None:
        self.assertIs(classify("ORIGINAL"), QualityTier.ORIGINAL)
        self.assertIs(classify("oem parts"), QualityTier.ORIGINAL)
        self.assertIs(classify("Genuine Original Ford"), QualityTier.ORIGINAL)

    def test_original_wins_over_premium_name(self) -> None:
        self.assertIs(classify("Bosch OEM"), QualityTier.ORIGINAL)

    def test_premium_codes_and_names(self) -> None:
        for supplier in ("1", "2", "BOSCH", "skf", " Valeo "):
            with self.subTest(supplier=supplier):
                self.assertIs(classify(supplier), QualityTier.PREMIUM)

    def test_numeric_premium_codes(self) -> None:
        self.assertIs(classify(1), QualityTier.PREMIUM)
        self.assertIs(classify(2.0), QualityTier.PREMIUM)

    def test_everything_else_is_standard(self) -> None:
        for supplier in ("3", "4", "GENERIC", "ACME", "", 7, 2.5):
            with self.subTest(supplier=supplier):
                self.assertIs(classify(supplier), QualityTier.STANDARD)

    def test_never_raises_on_odd_input(self) -> None:
        for supplier in (None, float("nan"), object(), [], {"a": 1}, True):
            with self.subTest(supplier=supplier):
                self.assertIn(classify(supplier), set(QualityTier))

    def test_premium_allow_list_is_exact_match(self) -> None:
        self.assertIn("1", PREMIUM_SUPPLIERS)
        self.assertIs(classify("11"), QualityTier.STANDARD)
        self.assertIs(classify("BOSCH GERMANY"), QualityTier.STANDARD)


class TestNormalizeSupplier(unittest.TestCase):
    def test_integral_float_drops_fraction(self) -> None:
        self.assertEqual(normalize_supplier(3.0), "3")

    def test_missing_values_become_empty(self) -> None:
        self.assertEqual(normalize_supplier(None), "")
        self.assertEqual(normalize_supplier(float("nan")), "")

    def test_text_is_stripped_and_uppercased(self) -> None:
        self.assertEqual(normalize_supplier("  skf "), "SKF")
