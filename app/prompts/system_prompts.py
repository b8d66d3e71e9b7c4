# Prompts and response schemas for every Gemini call in the lending pipeline.
#
# Prompts are written in Thai because the documents, reference tables and
# downstream forms are Thai. Every extraction prompt carries the same digit
# rule: Thai numeral glyphs (๐-๙) must come back as Arabic digits (0-9).
#
# Schemas use the OpenAPI subset accepted by `response_schema`.

# =============================================================================
# SHARED RULES
# =============================================================================
THAI_DIGIT_RULE = (
    "ตัวเลขทุกตัวที่เป็นเลขไทย (๐ ๑ ๒ ๓ ๔ ๕ ๖ ๗ ๘ ๙) "
    "ต้องแปลงเป็นเลขอารบิก (0 1 2 3 4 5 6 7 8 9) ก่อนตอบเสมอ "
    'เช่น "๑๒๓๔" ต้องตอบเป็น "1234"'
)

# =============================================================================
# TITLE DEED FIELD EXTRACTION
# =============================================================================
TITLE_DEED_EXTRACTION_PROMPT = f"""
วิเคราะห์รูปโฉนดที่ดินนี้และหาข้อมูลดังต่อไปนี้:
1. ชื่อจังหวัด (pvName)
2. ชื่ออำเภอ (amName)
3. เลขโฉนด (parcelNo)

กฎ:
- {THAI_DIGIT_RULE}
- ตอบเฉพาะชื่อ ไม่ต้องใส่คำนำหน้า "จังหวัด" หรือ "อำเภอ"
- หากไม่พบข้อมูลใดให้ใส่ค่าว่าง "" สำหรับฟิลด์นั้น ๆ ห้ามเดา

ตัวอย่าง: หากไม่เจอจังหวัดและอำเภอ แต่เจอเลขโฉนด ๑๒๓๔
{{"pvName": "", "amName": "", "parcelNo": "1234"}}
""".strip()

TITLE_DEED_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "pvName": {"type": "STRING"},
        "amName": {"type": "STRING"},
        "parcelNo": {"type": "STRING"},
    },
    "required": ["pvName", "amName", "parcelNo"],
}

# =============================================================================
# ID CARD FIELD EXTRACTION
# =============================================================================
ID_CARD_EXTRACTION_PROMPT = f"""
วิเคราะห์รูปบัตรประจำตัวประชาชนนี้และหาข้อมูลดังต่อไปนี้:
1. ชื่อ-นามสกุลภาษาไทย (fullName)
2. เลขประจำตัวประชาชน 13 หลัก (idCardNumber) ไม่มีขีดหรือช่องว่าง
3. วันเกิด (dateOfBirth) ตามที่ปรากฏบนบัตร
4. ที่อยู่ (address)

กฎ:
- {THAI_DIGIT_RULE}
- หากไม่พบข้อมูลใดให้ใส่ค่าว่าง "" ห้ามเดา
""".strip()

ID_CARD_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "fullName": {"type": "STRING"},
        "idCardNumber": {"type": "STRING"},
        "dateOfBirth": {"type": "STRING"},
        "address": {"type": "STRING"},
    },
    "required": ["fullName", "idCardNumber", "dateOfBirth", "address"],
}

# =============================================================================
# REFERENCE CODE MATCHING
# =============================================================================
PROVINCE_MATCH_PROMPT = """
จากชื่อจังหวัด "{province_name}" และข้อมูลจังหวัดต่อไปนี้:
{province_table}

กรุณาหารหัสจังหวัด (pvcode) ที่ตรงกับชื่อจังหวัดที่ให้มา
ให้ค้นหาแบบยืดหยุ่น (ชื่อย่อ การสะกดต่างกัน ชื่อบางส่วน หรือชื่อภาษาอังกฤษ)
เช่น "ชลบุรี" ควรตรงกับ "ชลบุรี" ใน pvnamethai

หากไม่มีจังหวัดใดในรายการที่ตรงกันอย่างสมเหตุสมผล ให้ตอบ pvCode เป็นค่าว่าง ""
ห้ามสร้างรหัสที่ไม่มีอยู่ในรายการ
""".strip()

PROVINCE_MATCH_SCHEMA = {
    "type": "OBJECT",
    "properties": {"pvCode": {"type": "STRING"}},
    "required": ["pvCode"],
}

DISTRICT_MATCH_PROMPT = """
จากชื่ออำเภอ "{district_name}" และข้อมูลอำเภอในจังหวัดรหัส "{province_code}":
{district_table}

กรุณาหารหัสอำเภอ (amcode) ที่ตรงกับชื่ออำเภอที่ให้มา
ให้ค้นหาแบบยืดหยุ่น เช่น "ศรีราชา" ควรตรงกับ "ศรีราชา" ใน amnamethai
และ "เมือง" ควรตรงกับ "เมือง<ชื่อจังหวัด>"

หากไม่มีอำเภอใดในรายการที่ตรงกันอย่างสมเหตุสมผล ให้ตอบ amCode เป็นค่าว่าง ""
ห้ามสร้างรหัสที่ไม่มีอยู่ในรายการ
""".strip()

DISTRICT_MATCH_SCHEMA = {
    "type": "OBJECT",
    "properties": {"amCode": {"type": "STRING"}},
    "required": ["amCode"],
}

# =============================================================================
# PROPERTY VALUATION
# =============================================================================
PROPERTY_VALUATION_PROMPT = """
คุณเป็นผู้เชี่ยวชาญด้านการประเมินมูลค่าทรัพย์สินในประเทศไทย
ประเมินมูลค่าตลาดโดยประมาณ (บาท) ของที่ดินจากข้อมูลต่อไปนี้:

ข้อมูลโฉนดจากกรมที่ดิน:
{registry_data}

ภาพที่แนบ: ภาพแรกคือรูปโฉนดที่ดิน ภาพที่เหลือ ({supporting_count} ภาพ) คือรูปประกอบของทรัพย์สิน

ให้พิจารณา:
1. ขนาดพื้นที่ (ไร่ งาน ตารางวา)
2. ราคาประเมินของกรมที่ดิน (ถ้ามี)
3. ทำเลที่ตั้ง จังหวัด อำเภอ ตำบล
4. สภาพทรัพย์สินจากรูปภาพ

ตอบ estimatedValue เป็นตัวเลขบาท (ไม่ติดลบ) reasoning เป็นเหตุผลภาษาไทยแบบกระชับ
และ confidence เป็นความมั่นใจ 0-100
""".strip()

NO_REGISTRY_DATA_PLACEHOLDER = "ไม่มีข้อมูลรายละเอียดจากกรมที่ดิน"

PROPERTY_VALUATION_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "estimatedValue": {"type": "NUMBER"},
        "reasoning": {"type": "STRING"},
        "confidence": {"type": "NUMBER"},
    },
    "required": ["estimatedValue", "reasoning", "confidence"],
}
