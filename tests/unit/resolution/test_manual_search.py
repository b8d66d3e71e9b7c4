"""Tests for the deterministic province/district matcher."""

import pytest

from app.services.resolution.manual_search import find_district_code_manual, find_province_code_manual
from app.services.resolution.reference_data import District, Province


class TestFindProvinceCodeManual:
    def test_exact_thai_name(self, provinces):
        assert find_province_code_manual("ชลบุรี", provinces) == "20"

    @pytest.mark.parametrize("name", ["Chon Buri", "chon buri", "CHON BURI"])
    def test_english_name_is_case_insensitive(self, provinces, name):
        assert find_province_code_manual(name, provinces) == "20"

    def test_substring_in_either_direction(self, provinces):
        # Input contains the table name
        assert find_province_code_manual("จังหวัดระยอง", provinces) == "21"
        # Table name contains the input
        assert find_province_code_manual("เชียง", provinces) == "50"
        assert find_province_code_manual("chiang", provinces) == "50"

    def test_exact_match_wins_over_earlier_substring_match(self):
        table = [
            Province(code="01", name_th="นครราชสีมา", name_en="Nakhon Ratchasima"),
            Province(code="02", name_th="นคร", name_en="Nakhon"),
        ]
        assert find_province_code_manual("นคร", table) == "02"

    def test_first_substring_match_in_table_order(self):
        table = [
            Province(code="01", name_th="สุพรรณบุรี", name_en="Suphan Buri"),
            Province(code="02", name_th="ชลบุรี", name_en="Chon Buri"),
        ]
        assert find_province_code_manual("บุรี", table) == "01"

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_empty_input_returns_empty(self, provinces, name):
        assert find_province_code_manual(name, provinces) == ""

    def test_unknown_name_returns_empty(self, provinces):
        assert find_province_code_manual("ภูเก็ต", provinces) == ""

    def test_is_pure(self, provinces):
        first = find_province_code_manual("rayong", provinces)
        second = find_province_code_manual("rayong", provinces)
        assert first == second == "21"


class TestFindDistrictCodeManual:
    def test_matches_within_province(self, districts):
        assert find_district_code_manual("ศรีราชา", "20", districts) == "08"

    def test_never_returns_district_from_another_province(self, districts):
        # "08" exists in Rayong too, under a different name
        assert find_district_code_manual("นิคมพัฒนา", "20", districts) == ""
        assert find_district_code_manual("นิคมพัฒนา", "21", districts) == "08"

    def test_sentinel_row_is_excluded(self, districts):
        assert find_district_code_manual("ไม่ระบุอำเภอ", "20", districts) == ""
        assert find_district_code_manual("Unspecified", "20", districts) == ""

    def test_english_case_insensitive(self, districts):
        assert find_district_code_manual("si racha", "20", districts) == "08"
        assert find_district_code_manual("BANG LAMUNG", "20", districts) == "04"

    def test_substring_match(self, districts):
        assert find_district_code_manual("อำเภอบางละมุง", "20", districts) == "04"

    def test_empty_province_code_returns_empty(self, districts):
        assert find_district_code_manual("ศรีราชา", "", districts) == ""

    def test_empty_name_returns_empty(self, districts):
        assert find_district_code_manual("", "20", districts) == ""

    def test_is_pure(self, districts):
        snapshot = list(districts)
        assert find_district_code_manual("Si Racha", "20", districts) == find_district_code_manual(
            "Si Racha", "20", districts
        )
        assert districts == snapshot

    def test_accepts_any_iterable(self, districts):
        rows = (d for d in districts)
        assert find_district_code_manual("เมืองชลบุรี", "20", rows) == "01"

    def test_exact_before_substring(self):
        table = [
            District(province_code="30", code="01", name_th="เมืองนครราชสีมา", name_en="Mueang Nakhon Ratchasima"),
            District(province_code="30", code="02", name_th="ครบุรี", name_en="Khon Buri"),
        ]
        assert find_district_code_manual("ครบุรี", "30", table) == "02"
