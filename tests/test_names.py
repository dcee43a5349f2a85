"""
Unit tests for roster_sync.core.identity.names.

Covers the three key policies side by side:
- strict_key (Directory membership, person IDs, tiers)
- loose_key (cross-tab union)
- fallback_key (single-name guest rows)
"""

import unittest

from roster_sync.core.identity.names import (
    capitalize_name,
    display_name,
    fallback_key,
    loose_key,
    split_full_name,
    strict_key,
)


class TestStrictKey(unittest.TestCase):
    def test_keeps_first_token_of_first_name(self):
        self.assertEqual(strict_key("Smith", "John Paul"), "smith_john")

    def test_drops_everything_outside_ascii_letters(self):
        self.assertEqual(strict_key("O'Neil", "Mary-Kate"), "oneil_marykate")
        self.assertEqual(strict_key("Núñez", "José"), "nez_jos")

    def test_empty_when_both_parts_empty(self):
        self.assertEqual(strict_key("", ""), "")
        self.assertEqual(strict_key("123", "!!"), "")
        self.assertEqual(strict_key(None, None), "")

    def test_one_sided_key_is_still_valid(self):
        self.assertEqual(strict_key("Smith", ""), "smith_")

    def test_case_and_whitespace_insensitive(self):
        self.assertEqual(strict_key("  SMITH ", " john  paul"), strict_key("Smith", "John"))


class TestLooseKey(unittest.TestCase):
    def test_trims_and_lowercases(self):
        self.assertEqual(loose_key(" smith ", "JOHN "), "smith|john")

    def test_variants_collapse_to_one_identity(self):
        self.assertEqual(loose_key("Smith", "John"), loose_key(" smith ", " JOHN "))

    def test_keeps_accented_letters(self):
        self.assertEqual(loose_key("Núñez", "José"), "núñez|josé")

    def test_keeps_whole_first_name(self):
        self.assertEqual(loose_key("Smith", "John Paul"), "smith|johnpaul")
        self.assertNotEqual(loose_key("Smith", "John Paul"), loose_key("Smith", "John"))

    def test_none_when_both_empty(self):
        self.assertIsNone(loose_key("", "  "))

    def test_single_name(self):
        self.assertEqual(loose_key("Smith", ""), "smith|")


class TestFallbackKey(unittest.TestCase):
    def test_only_last_name(self):
        self.assertEqual(fallback_key(" Smith ", ""), "smith")

    def test_only_first_name(self):
        self.assertEqual(fallback_key("", " Ann "), "ann")

    def test_none_when_both_or_neither_present(self):
        self.assertIsNone(fallback_key("Smith", "Ann"))
        self.assertIsNone(fallback_key("", ""))


class TestDisplayForms(unittest.TestCase):
    def test_capitalize_hyphenated(self):
        self.assertEqual(capitalize_name("arai-joseph"), "Arai-Joseph")

    def test_capitalize_words(self):
        self.assertEqual(capitalize_name("  MARY ann "), "Mary Ann")

    def test_capitalize_empty(self):
        self.assertEqual(capitalize_name(None), "")

    def test_display_name(self):
        self.assertEqual(display_name(" Smith", "John "), "John Smith")
        self.assertEqual(display_name("Smith", ""), "Smith")

    def test_split_full_name(self):
        self.assertEqual(split_full_name("Smith, John Paul"), ("Smith", "John Paul"))
        self.assertEqual(split_full_name(" Mary  Ann Lee (Guest)"), ("Lee", "Mary Ann"))
        self.assertEqual(split_full_name("Cher"), ("", "Cher"))
        self.assertEqual(split_full_name(None), ("", ""))


if __name__ == "__main__":
    unittest.main()
