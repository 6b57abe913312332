from pydantic import BaseModel, Field
from enum import Enum
from typing import Dict, List, Optional

# Using Python's standard Enum for controlled vocabularies
class CourseType(str, Enum):
    """The closed set of buckets a course's credits are counted under."""
    MAJOR = "major"
    DOUBLE_MAJOR = "double_major"
    MINOR = "minor"
    OPEN_ELECTIVE = "open_elective"
    GENERAL_EDUCATION = "general_education"
    OTHER = "other"

class DoubleMajorType(str, Enum):
    """Enumeration for the relationship a student has with a secondary major."""
    DOUBLE_MAJOR = "DOUBLE_MAJOR"
    MINOR = "MINOR"
    INTENSIVE = "INTENSIVE"
    INTENSIVE_MINOR = "INTENSIVE_MINOR"
    NONE = "NONE"

# Tag the catalog ingester puts on major courses before they are resolved per student.
MAJOR_CANDIDATE_TAG = "major_candidate"

# --- Base Models Reflecting the Course Catalog ---

class TimeSlot(BaseModel):
    """The periods a course occupies on one day of the week."""
    day: Optional[str] = Field(None, description="Day token (e.g., 'Mon'). Missing means no occupancy.")
    periods: List[int] = Field(default_factory=list, description="Period numbers occupied on that day (1-15).")

    @property
    def start_period(self) -> Optional[int]:
        return min(self.periods) if self.periods else None

    @property
    def end_period(self) -> Optional[int]:
        return max(self.periods) if self.periods else None

class Course(BaseModel):
    """Represents a single course offering from the catalog."""
    course_code: str = Field(description="The unique catalog code of the offering (e.g., 'M01201101').")
    course_name: str = Field("", description="Human-readable course name.")
    department_original: Optional[str] = Field(None, description="Raw department label as it appears in the catalog.")
    specific_major: Optional[str] = Field(None, description="The specific major this course belongs to, if any.")
    group_id: Optional[str] = Field(None, description="Shared key of cross-listed sections of the same logical course.")
    generalized_type: Optional[str] = Field(None, description="Type tag assigned at ingestion (e.g., 'general_education').")
    credits: int = Field(0, description="Credit value of the course.")
    grade: Optional[str] = Field(None, description="Target grade level of the course.")
    professor: Optional[str] = Field(None)
    classroom: Optional[str] = Field(None)
    remarks: Optional[str] = Field(None)
    schedule_slots: List[TimeSlot] = Field(default_factory=list, description="Weekly meeting times.")
    is_restricted: bool = Field(False, description="Whether the course is only open to a specific audience.")

    class Config:
        frozen = True

    @property
    def identity_key(self) -> str:
        """The group id when present, else the course code."""
        return self.group_id if self.group_id else self.course_code

class CourseCatalog(BaseModel):
    """A top-level model to hold every course visible to the student."""
    courses: List[Course] = Field(default_factory=list)

# --- Models for the Student and their Preferences ---

class StudentProfile(BaseModel):
    """The parts of a student's record the type classifier looks at."""
    student_id: Optional[str] = Field(None)
    name: Optional[str] = Field(None)
    grade: Optional[int] = Field(None, description="The student's current year (1-4).")
    major: Optional[str] = Field(None, description="Primary major name.")
    double_major: Optional[str] = Field(None, description="Secondary major name, if any.")
    double_major_type: DoubleMajorType = Field(DoubleMajorType.NONE)

class CourseSelection(BaseModel):
    """Course codes the student has taken, must take, or is retaking."""
    taken_courses: List[str] = Field(default_factory=list)
    mandatory_courses: List[str] = Field(default_factory=list)
    retake_courses: List[str] = Field(default_factory=list)

class CreditRange(BaseModel):
    """An inclusive [min, max] bound on credits for one type bucket."""
    min: int = Field(0)
    max: int = Field(0)

class CreditSettings(BaseModel):
    """Per-type credit goals plus optional total bounds and traversal order."""
    credit_goals_per_type: Dict[str, CreditRange] = Field(default_factory=dict)
    course_type_combination: Optional[List[str]] = Field(None, description="Ordered target types. Defaults to the goal keys.")
    min_total_credits: Optional[int] = Field(None)
    max_total_credits: Optional[int] = Field(None)

    def target_types(self) -> List[str]:
        if self.course_type_combination:
            return list(self.course_type_combination)
        return list(self.credit_goals_per_type.keys())

class TimePreference(BaseModel):
    """Allowed day/period windows. An empty list allows everything."""
    preferred_time_slots: List[TimeSlot] = Field(default_factory=list)

class RecommendationRequest(BaseModel):
    """Everything the recommender needs besides the catalog itself."""
    student: StudentProfile = Field(default_factory=StudentProfile)
    selection: CourseSelection = Field(default_factory=CourseSelection)
    credit_settings: CreditSettings = Field(default_factory=CreditSettings)
    time_preference: TimePreference = Field(default_factory=TimePreference)

# --- Models for the Recommender's Output ---

class ScheduledCourse(BaseModel):
    """A course as it appears in a recommended timetable, with its resolved type."""
    course_code: str = Field(...)
    course_name: str = Field("")
    course_type: str = Field(..., description="The bucket this course counts under for the student.")
    credits: int = Field(0)
    professor: Optional[str] = Field(None)
    classroom: Optional[str] = Field(None)
    remarks: Optional[str] = Field(None)
    actual_class_times: List[TimeSlot] = Field(default_factory=list)

class RecommendedTimetable(BaseModel):
    """One fully assembled timetable annotated with its credit breakdown."""
    timetable_id: int = Field(..., description="1-based rank in traversal order; 0 for the mandatory-only fallback.")
    scheduled_courses: List[ScheduledCourse]
    credits_by_type: Dict[str, int] = Field(default_factory=dict)
    total_credits: int = Field(0)
