"""Tests for the loan application property summary."""

from app.services.property_info import DEFAULT_PROPERTY_TYPE, extract_property_info


def test_registry_record_fills_summary(sample_registry_record):
    info = extract_property_info(sample_registry_record)

    assert info.property_location == "สุรศักดิ์ ศรีราชา ชลบุรี"
    assert info.property_area == "1 ไร่ 2 งาน 30.5 ตารางวา"
    assert info.owner_name == "นายทดสอบ ระบบ"
    assert info.property_type == "โฉนดที่ดิน"
    # The registry's parcel number is not used
    assert info.land_number == ""


def test_missing_land_type_uses_default():
    info = extract_property_info({"result": [{"rai": 0}]})

    assert info.property_type == DEFAULT_PROPERTY_TYPE
    assert info.property_area == "0 ไร่ 0 งาน 0 ตารางวา"


def test_manual_data_overrides_location(sample_registry_record):
    info = extract_property_info(
        sample_registry_record,
        manual_data={"amName": "บางละมุง", "pvName": "ชลบุรี", "parcelNo": "1234"},
    )

    assert info.property_location == "บางละมุง ชลบุรี"
    assert info.land_number == "1234"
    assert info.owner_name == "นายทดสอบ ระบบ"


def test_analysis_only_fills_gaps(sample_registry_record):
    info = extract_property_info(
        sample_registry_record,
        analysis={"amName": "อื่น", "pvName": "อื่น", "parcelNo": "777"},
    )

    assert info.property_location == "สุรศักดิ์ ศรีราชา ชลบุรี"
    assert info.land_number == "777"


def test_analysis_without_registry():
    info = extract_property_info(None, analysis={"amName": "ศรีราชา", "pvName": "ชลบุรี", "parcelNo": "56789"})

    assert info.property_location == "ศรีราชา ชลบุรี"
    assert info.land_number == "56789"
    assert info.owner_name == ""


def test_serializes_with_camel_case_keys():
    assert set(extract_property_info(None).model_dump(by_alias=True)) == {
        "propertyLocation",
        "propertyArea",
        "ownerName",
        "propertyType",
        "landNumber",
    }
