import logging
from typing import Optional
from schemas import (
    Course, StudentProfile, CreditSettings,
    CourseType, DoubleMajorType, MAJOR_CANDIDATE_TAG
)

logger = logging.getLogger(__name__)

# --- Constants for Catalog Pre-tagging ---
GROUP_ID_LENGTH = 7
GENERAL_EDUCATION_LABELS = {"general_education", "교양"}
MAJOR_LABELS = {"major", "전공"}
MAJOR_DEPARTMENT_MARKERS = ("학부", "학과", "전공", "department", "school of")

# Departments whose courses are only open to a specific audience. A course
# from one of these is tagged with the keyword itself and flagged restricted.
RESTRICTED_COURSE_KEYWORDS = [
    "군사학", "경상대학", "교직", "인문대학", "자연과학대학", "폴란드학과", "한국학과",
    "이공계열", "우크라이나학과", "그리스·불가리아학과", "중앙아시아학과", "루마니아학과",
    "AI융합대학", "공과대학(공과계열)", "CULTURE&TECHNOLOGY융합대학",
    "체코·슬로바키아학과", "아프리카학부",
]

SECONDARY_MAJOR_LABELS = {
    DoubleMajorType.DOUBLE_MAJOR: CourseType.DOUBLE_MAJOR.value,
    DoubleMajorType.MINOR: CourseType.MINOR.value,
    DoubleMajorType.INTENSIVE_MINOR: CourseType.MINOR.value,
}

# --- Per-student Type Classification ---

def classify_course(course: Optional[Course], student: Optional[StudentProfile], settings: Optional[CreditSettings] = None) -> str:
    """
    Resolves the bucket a course counts under for this particular student.
    First match wins: own major, secondary major, other department's major,
    the ingestion tag, and finally 'other'. Never raises.
    """
    if course is None or student is None:
        logger.warning("classify_course called without a course or a student; counting it as '%s'.", CourseType.OTHER.value)
        return CourseType.OTHER.value

    specific_major = (course.specific_major or "").strip()
    if specific_major:
        if _same_major(specific_major, student.major):
            return CourseType.MAJOR.value
        if _same_major(specific_major, student.double_major):
            label = SECONDARY_MAJOR_LABELS.get(student.double_major_type)
            if label is not None:
                return label

    if course.generalized_type == MAJOR_CANDIDATE_TAG:
        # A major course of a department that is neither of the student's.
        return CourseType.OPEN_ELECTIVE.value

    if course.generalized_type:
        return course.generalized_type

    return CourseType.OTHER.value

def _same_major(course_major: str, student_major: Optional[str]) -> bool:
    if not student_major:
        return False
    return course_major.casefold() == student_major.strip().casefold()

# --- Catalog Pre-tagging ---

def determine_generalized_type(department_original: Optional[str]) -> str:
    """
    Maps a raw catalog department label to the type tag stored on the course.
    """
    if department_original is None or not department_original.strip():
        return CourseType.OTHER.value
    dept = department_original.strip().lower()
    if dept in GENERAL_EDUCATION_LABELS:
        return CourseType.GENERAL_EDUCATION.value
    if dept in MAJOR_LABELS:
        return MAJOR_CANDIDATE_TAG
    for keyword in RESTRICTED_COURSE_KEYWORDS:
        if keyword.lower() in dept:
            return keyword
    if any(marker in dept for marker in MAJOR_DEPARTMENT_MARKERS):
        return MAJOR_CANDIDATE_TAG
    return CourseType.OTHER.value

def derive_group_id(course_code: str) -> str:
    """Sections of the same logical course share the leading digits of their code."""
    return course_code[:GROUP_ID_LENGTH] if len(course_code) >= GROUP_ID_LENGTH else course_code

def is_restricted_type(generalized_type: str) -> bool:
    return generalized_type not in (CourseType.GENERAL_EDUCATION.value, MAJOR_CANDIDATE_TAG)
