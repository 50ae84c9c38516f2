"""
Unit tests for the slug codec.

Contract:
- decode(encode(x)) == x for every identity the tables can express
- decoding never raises; unusable slugs give None
- encoding an unknown program or degree raises
"""

import unittest

from gsomtimetable.errors import SlugFormatError, UnknownProgramOrDegreeError
from gsomtimetable.model import BACHELOR, MASTER, ProgramIdentity
from gsomtimetable.slugs import (
    PROGRAM_CODES,
    decode_slug,
    encode_slug,
    format_program_name,
    full_code,
    identity_for_full_code,
    identity_for_group,
    parse_slug,
    program_for_group,
    split_full_code,
)


class TestEncode(unittest.TestCase):
    def test_bachelor_management(self) -> None:
        self.assertEqual(encode_slug("Management", 2024, "B01", "bachelor"), "bak-men-24-b01")

    def test_master_from_full_code(self) -> None:
        slug = encode_slug("Business Analytics and Big Data", 2023, "23.M04-vshm", "master")
        self.assertEqual(slug, "mag-babd-23-m04")

    def test_accepts_abbreviations_and_degree_titles(self) -> None:
        self.assertEqual(encode_slug("cfin", "2022", "m02", "Master's"), "mag-cfin-22-m02")
        self.assertEqual(encode_slug("gmu", 2021, "b09", "bak"), "bak-gmu-21-b09")

    def test_unknown_program_raises(self) -> None:
        with self.assertRaises(UnknownProgramOrDegreeError):
            encode_slug("Astrophysics", 2024, "B01", "bachelor")

    def test_unknown_degree_raises(self) -> None:
        with self.assertRaises(UnknownProgramOrDegreeError):
            encode_slug("Management", 2024, "B01", "doctorate")

    def test_bad_group_raises(self) -> None:
        with self.assertRaises(SlugFormatError):
            encode_slug("Management", 2024, "B1", "bachelor")

    def test_year_outside_century_raises(self) -> None:
        with self.assertRaises(SlugFormatError):
            encode_slug("Management", 1999, "B01", "bachelor")

    def test_identity_slug_property(self) -> None:
        identity = ProgramIdentity(MASTER, "Smart City Management", 2024, "M03")
        self.assertEqual(identity.slug, "mag-scm-24-m03")
        self.assertEqual(identity.full_code, "24.M03-vshm")

    def test_identity_full_code_rejects_year_outside_century(self) -> None:
        with self.assertRaises(SlugFormatError):
            ProgramIdentity(BACHELOR, "Management", 1999, "B01").full_code


class TestDecode(unittest.TestCase):
    def test_decode_example(self) -> None:
        identity = decode_slug("bak-men-24-b01")
        self.assertEqual(identity, ProgramIdentity(BACHELOR, "Management", 2024, "B01"))
        assert identity is not None
        self.assertEqual(identity.full_code, "24.B01-vshm")

    def test_round_trip_all_identities(self) -> None:
        groups = ["B01", "B12", "M04", "A99"]
        for degree in (BACHELOR, MASTER):
            for program in PROGRAM_CODES:
                for year in (2000, 2009, 2024, 2099):
                    for group in groups:
                        identity = ProgramIdentity(degree, program, year, group)
                        with self.subTest(identity=identity):
                            self.assertEqual(decode_slug(identity.slug), identity)

    def test_wrong_part_count_returns_none(self) -> None:
        for slug in ["", "bak", "bak-men-24", "bak-men-24-b01-x", "bak--men-24-b01"]:
            with self.subTest(slug=slug):
                self.assertIsNone(decode_slug(slug))

    def test_unknown_program_returns_none(self) -> None:
        self.assertIsNone(decode_slug("bak-xyz-24-b01"))

    def test_malformed_year_or_group_returns_none(self) -> None:
        self.assertIsNone(decode_slug("bak-men-2x-b01"))
        self.assertIsNone(decode_slug("bak-men-24-b1"))

    def test_four_digit_year_is_accepted(self) -> None:
        self.assertEqual(decode_slug("bak-men-2024-b01"), ProgramIdentity(BACHELOR, "Management", 2024, "B01"))
        self.assertIsNone(decode_slug("bak-men-1924-b01"))

    def test_non_ascii_digits_return_none(self) -> None:
        # Arabic-Indic digits pass str.isdigit() but are not slug digits
        self.assertIsNone(decode_slug("bak-men-24-b٠١"))
        self.assertIsNone(decode_slug("bak-men-٢٤-b01"))
        with self.assertRaises(SlugFormatError):
            full_code("٢٤", "B01")
        with self.assertRaises(SlugFormatError):
            split_full_code("24.B٠١-vshm")

    def test_non_mag_degree_means_bachelor(self) -> None:
        identity = decode_slug("xyz-men-24-b01")
        assert identity is not None
        self.assertEqual(identity.degree, BACHELOR)

    def test_parse_slug_raises_specific_errors(self) -> None:
        with self.assertRaises(SlugFormatError):
            parse_slug("bak-men-24")
        with self.assertRaises(UnknownProgramOrDegreeError):
            parse_slug("bak-xyz-24-b01")

    def test_uppercase_slug_is_accepted(self) -> None:
        identity = decode_slug("MAG-CFIN-23-M02")
        self.assertEqual(identity, ProgramIdentity(MASTER, "Corporate Finance", 2023, "M02"))


class TestFullCodesAndGroups(unittest.TestCase):
    def test_full_code(self) -> None:
        self.assertEqual(full_code(2024, "b01"), "24.B01-vshm")
        self.assertEqual(split_full_code("24.B01-vshm"), ("24", "B01"))

    def test_split_rejects_other_suffix(self) -> None:
        with self.assertRaises(SlugFormatError):
            split_full_code("24.B01-spbu")

    def test_program_for_group(self) -> None:
        self.assertEqual(program_for_group("b08"), "Management")
        self.assertEqual(program_for_group("B10"), "Public Administration")
        self.assertEqual(program_for_group("b11"), "International Management")
        self.assertEqual(program_for_group("m02"), "Corporate Finance")

    def test_unassigned_group_raises(self) -> None:
        with self.assertRaises(UnknownProgramOrDegreeError):
            program_for_group("b13")
        with self.assertRaises(UnknownProgramOrDegreeError):
            program_for_group("m05")

    def test_identity_for_group(self) -> None:
        identity = identity_for_group("24", "m01")
        self.assertEqual(identity, ProgramIdentity(MASTER, "Management", 2024, "M01"))
        self.assertEqual(identity.slug, "mag-men-24-m01")
        self.assertEqual(identity_for_full_code("23.B12-vshm").slug, "bak-mmen-23-b12")

    def test_format_program_name(self) -> None:
        identity = ProgramIdentity(BACHELOR, "Management", 2024, "B01")
        self.assertEqual(format_program_name(identity), "Bachelor's in Management - 2024 - Group B01")


if __name__ == "__main__":
    unittest.main()
