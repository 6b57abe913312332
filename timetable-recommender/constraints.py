import logging
from typing import Callable, Dict, List, Optional, Sequence
from schemas import Course, CreditSettings, CourseType

logger = logging.getLogger(__name__)

# --- Type Aliases ---
Timetable = List[Course]
Classifier = Callable[[Course], str]

# --- Hard Constraint Checking ---

def has_time_conflict(courses: Optional[Sequence[Course]]) -> bool:
    """
    Returns True as soon as two courses in the list occupy the same (day, period).
    Each day is tracked as an int bitmask indexed by period number.
    """
    if not courses or len(courses) < 2:
        return False
    occupied: Dict[str, int] = {}
    for course in courses:
        for slot in course.schedule_slots:
            if not slot.day:
                continue
            day_mask = occupied.get(slot.day, 0)
            for period in slot.periods:
                if period < 0:
                    continue
                bit = 1 << period
                if day_mask & bit:
                    logger.debug("Time conflict: %s (%s) period %d on %s is already taken.",
                                 course.course_name, course.course_code, period, slot.day)
                    return True
                day_mask |= bit
            occupied[slot.day] = day_mask
    return False

def has_duplicate_course(courses: Sequence[Course]) -> bool:
    """True if two courses in the list share an identity key."""
    keys = [course.identity_key for course in courses]
    return len(keys) != len(set(keys))

# --- Credit Aggregation ---

def calculate_credits_by_type(courses: Sequence[Course], classify: Classifier, settings: Optional[CreditSettings] = None) -> Dict[str, int]:
    """
    Sums credits per type bucket. Every type named in the settings starts at 0
    so that an empty bucket is distinguishable from an unconfigured one.
    """
    credits_map: Dict[str, int] = {}
    if settings is not None:
        for course_type in settings.credit_goals_per_type:
            credits_map[course_type] = 0
    for course in courses:
        course_type = classify(course) or CourseType.OTHER.value
        credits_map[course_type] = credits_map.get(course_type, 0) + max(course.credits, 0)
    return credits_map

def total_credits(credits_by_type: Dict[str, int]) -> int:
    return sum(credits_by_type.values())

def meets_all_credit_criteria(timetable: Sequence[Course], settings: CreditSettings, classify: Classifier) -> bool:
    """
    The global acceptance check for a fully assembled timetable: total bounds
    when set, and every configured type's range. An empty timetable is held
    to the same bounds, with every bucket at 0.
    """
    credits_map = calculate_credits_by_type(timetable, classify, settings)
    total = total_credits(credits_map)

    if settings.min_total_credits is not None and total < settings.min_total_credits:
        return False
    if settings.max_total_credits is not None and total > settings.max_total_credits:
        return False

    for course_type, credit_range in settings.credit_goals_per_type.items():
        credits_for_type = credits_map.get(course_type, 0)
        if credits_for_type < credit_range.min or credits_for_type > credit_range.max:
            return False
    return True
