import json
import logging
import pandas as pd
from pathlib import Path
from typing import Any, Dict, List, Optional
from pydantic import ValidationError
from schemas import CourseCatalog, Course, TimeSlot, RecommendationRequest
from classifier import determine_generalized_type, derive_group_id, is_restricted_type

logger = logging.getLogger(__name__)

COURSES_SHEET = "Courses"
REQUIRED_COLUMNS = ["course_code", "course_name", "department", "credits", "schedule"]

# Keys of the JSON catalog export
JSON_KEYS = {
    "course_code": "학수번호",
    "course_name": "교과목명",
    "department_original": "개설영역",
    "specific_major": "세부전공",
    "credits": "학점",
    "grade": "학년",
    "professor": "담당교수",
    "classroom": "강의실",
    "remarks": "비고",
    "schedule_slots": "시간표정보",
}
JSON_SLOT_DAY = "요일"
JSON_SLOT_PERIODS = "교시들"

def _optional_str(value: Any) -> Optional[str]:
    """Normalises spreadsheet cells: NaN and blank strings become None."""
    if value is None or (not isinstance(value, (list, dict)) and pd.isna(value)):
        return None
    s_value = str(value).strip()
    return s_value or None

def _parse_int(value: Any, default: int = 0) -> int:
    if value is None or pd.isna(value):
        return default
    return int(float(value))

def parse_comma_separated_field(value: Any) -> List[str]:
    """
    Safely parses a string that may contain comma-separated values into a list of strings.
    Handles empty, NaN, or non-string values gracefully.
    """
    if value is None or pd.isna(value):
        return []
    s_value = str(value)
    if not s_value.strip():
        return []
    items = [item.strip() for item in s_value.split(',')]
    return [item for item in items if item]

def parse_schedule_field(value: Any) -> List[TimeSlot]:
    """
    Parses a schedule cell like 'Mon:1,2,3;Wed:4,5' into TimeSlots.
    Unparseable day entries are skipped.
    """
    slot_text = _optional_str(value)
    if slot_text is None:
        return []
    slots: List[TimeSlot] = []
    for entry in slot_text.split(';'):
        if ':' not in entry:
            continue
        day, periods_text = entry.split(':', 1)
        try:
            periods = [int(p) for p in parse_comma_separated_field(periods_text)]
        except ValueError:
            logger.warning("Skipping unreadable schedule entry '%s'.", entry.strip())
            continue
        if day.strip() and periods:
            slots.append(TimeSlot(day=day.strip(), periods=periods))
    return slots

def build_course(course_code: str, course_name: str = "", department_original: Optional[str] = None, **fields) -> Course:
    """
    Creates a catalog course with the ingestion-time tags filled in:
    group id, generalized type and the restricted flag.
    """
    generalized_type = determine_generalized_type(department_original)
    return Course(
        course_code=course_code,
        course_name=course_name,
        department_original=department_original,
        group_id=derive_group_id(course_code),
        generalized_type=generalized_type,
        is_restricted=is_restricted_type(generalized_type),
        **fields,
    )

def _parse_courses(df: pd.DataFrame) -> List[Course]:
    """
    Parses the Courses sheet. Rows without a course code or with unreadable
    credits are skipped with a warning.
    """
    courses: List[Course] = []
    for index, row in df.iterrows():
        course_code = _optional_str(row['course_code'])
        if course_code is None:
            logger.warning("Skipping row %s: missing course code.", index)
            continue
        try:
            course = build_course(
                course_code,
                course_name=_optional_str(row['course_name']) or "",
                department_original=_optional_str(row['department']),
                specific_major=_optional_str(row.get('specific_major')),
                credits=max(_parse_int(row['credits']), 0),
                grade=_optional_str(row.get('grade')),
                professor=_optional_str(row.get('professor')),
                classroom=_optional_str(row.get('classroom')),
                remarks=_optional_str(row.get('remarks')),
                schedule_slots=parse_schedule_field(row['schedule']),
            )
        except (ValueError, ValidationError) as e:
            logger.warning("Skipping course '%s': %s", course_code, e)
            continue
        courses.append(course)
    return courses

def load_catalog_from_excel(file_path: Any) -> CourseCatalog:
    """
    Main public function to read the course catalog from an Excel file,
    parse and validate it, and return a single CourseCatalog object.
    """
    if isinstance(file_path, (str, Path)):
        file_path = Path(file_path).expanduser()
        if not file_path.exists():
            raise FileNotFoundError(f'Fatal Error: provided file path {file_path} does not exist.')
    try:
        sheets = pd.read_excel(file_path, sheet_name=None)

        if COURSES_SHEET not in sheets:
            raise ValueError(f"Required sheet '{COURSES_SHEET}' not found in the Excel file.")
        df = sheets[COURSES_SHEET]
        missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
        if missing:
            raise ValueError(f"Sheet '{COURSES_SHEET}' is missing column(s): {', '.join(missing)}")

        courses = _parse_courses(df)
        logger.info("Loaded %d course(s) from the Excel catalog.", len(courses))
        return CourseCatalog(courses=courses)

    except Exception as e:
        raise ValueError(f"Failed to load or parse the course catalog. Reason: {e}")

def _parse_json_slot(raw_slot: Dict[str, Any]) -> Optional[TimeSlot]:
    day = raw_slot.get(JSON_SLOT_DAY)
    periods = raw_slot.get(JSON_SLOT_PERIODS) or []
    if not day or not periods:
        return None
    return TimeSlot(day=day, periods=[int(p) for p in periods])

def _parse_json_record(record: Dict[str, Any]) -> Optional[Course]:
    course_code = _optional_str(record.get(JSON_KEYS["course_code"]))
    if course_code is None:
        return None
    slots = [_parse_json_slot(raw) for raw in record.get(JSON_KEYS["schedule_slots"]) or []]
    return build_course(
        course_code,
        course_name=_optional_str(record.get(JSON_KEYS["course_name"])) or "",
        department_original=_optional_str(record.get(JSON_KEYS["department_original"])),
        specific_major=_optional_str(record.get(JSON_KEYS["specific_major"])),
        credits=max(_parse_int(record.get(JSON_KEYS["credits"])), 0),
        grade=_optional_str(record.get(JSON_KEYS["grade"])),
        professor=_optional_str(record.get(JSON_KEYS["professor"])),
        classroom=_optional_str(record.get(JSON_KEYS["classroom"])),
        remarks=_optional_str(record.get(JSON_KEYS["remarks"])),
        schedule_slots=[slot for slot in slots if slot is not None],
    )

def load_catalog_from_json(file_path: str) -> CourseCatalog:
    """
    Reads a JSON catalog export (a list of course records keyed in Korean)
    into a CourseCatalog. Malformed records are skipped with a warning.
    """
    file_path_obj = Path(file_path).expanduser()
    if not file_path_obj.exists():
        raise FileNotFoundError(f'Fatal Error: provided file path {file_path_obj} does not exist.')
    try:
        records = json.loads(file_path_obj.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to load or parse the course catalog. Reason: {e}")
    if not isinstance(records, list):
        raise ValueError("Failed to load or parse the course catalog. Reason: expected a list of course records.")

    courses: List[Course] = []
    for index, record in enumerate(records):
        try:
            course = _parse_json_record(record)
        except (ValueError, TypeError, AttributeError, ValidationError) as e:
            logger.warning("Skipping catalog record %d: %s", index, e)
            continue
        if course is None:
            logger.warning("Skipping catalog record %d: missing course code.", index)
            continue
        courses.append(course)
    logger.info("Loaded %d course(s) from the JSON catalog.", len(courses))
    return CourseCatalog(courses=courses)

def load_request_from_json(file_path: str) -> RecommendationRequest:
    """Reads the student's profile, selections and preferences from JSON."""
    file_path_obj = Path(file_path).expanduser()
    if not file_path_obj.exists():
        raise FileNotFoundError(f'Fatal Error: provided file path {file_path_obj} does not exist.')
    try:
        return RecommendationRequest.model_validate_json(file_path_obj.read_text(encoding="utf-8"))
    except ValidationError as e:
        raise ValueError(f"Failed to load or parse the recommendation request. Reason: {e}")

if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    try:
        catalog = load_catalog_from_excel('./Courses.xlsx')
        print("Successfully loaded the course catalog!")
        print(f"Total courses: {len(catalog.courses)}")
    except (ValueError, FileNotFoundError) as e:
        print(e)
