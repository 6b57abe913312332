import logging
from typing import Dict, List, Optional, Set
from schemas import (
    Course, CourseCatalog, CourseSelection, CreditSettings, StudentProfile,
    TimePreference, RecommendationRequest, RecommendedTimetable, ScheduledCourse
)
from classifier import classify_course
from constraints import (
    Timetable,
    has_time_conflict,
    calculate_credits_by_type,
    total_credits,
    meets_all_credit_criteria,
)
from combination_solver import CombinationSolver, MAX_RECOMMENDATIONS, validate_search_config
from errors import MandatoryCourseConflictError

logger = logging.getLogger(__name__)

# --- Upstream Filtering ---

def prepare_candidate_courses(catalog: CourseCatalog, selection: CourseSelection) -> List[Course]:
    """
    Removes courses the student has already taken (matched by identity key so
    other sections of the same course go too), keeping explicit retakes.
    """
    by_code = {course.course_code: course for course in catalog.courses}
    taken_keys: Set[str] = set()
    for code in selection.taken_courses:
        course = by_code.get(code)
        taken_keys.add(course.identity_key if course else code)

    retake_codes = set(selection.retake_courses)
    return [
        course for course in catalog.courses
        if course.course_code in retake_codes or course.identity_key not in taken_keys
    ]

def get_and_validate_mandatory_courses(candidates: List[Course], selection: CourseSelection) -> List[Course]:
    """
    Collects the mandatory and retake courses, one per identity key, and
    raises if they cannot all sit in the same week.
    """
    mandatory_codes = set(selection.mandatory_courses) | set(selection.retake_courses)
    if not mandatory_codes:
        return []

    mandatory_by_key: Dict[str, Course] = {}
    for course in candidates:
        if course.course_code in mandatory_codes:
            mandatory_by_key.setdefault(course.identity_key, course)
    mandatory_courses = list(mandatory_by_key.values())

    missing = mandatory_codes - {course.course_code for course in candidates}
    if missing:
        logger.warning("Mandatory/retake course(s) not found in the catalog: %s", ", ".join(sorted(missing)))

    if has_time_conflict(mandatory_courses):
        conflicting = ", ".join(f"{c.course_name}({c.course_code})" for c in mandatory_courses)
        logger.error("Mandatory/retake courses overlap in time: %s", conflicting)
        raise MandatoryCourseConflictError(
            f"Mandatory/retake courses overlap in time: {conflicting}",
            [c.course_code for c in mandatory_courses],
        )
    return mandatory_courses

def filter_by_time_preferences(courses: List[Course], preference: Optional[TimePreference]) -> List[Course]:
    """
    Keeps only courses that meet entirely inside the allowed windows. With no
    preferred slots, the pool is returned unchanged.
    """
    if preference is None or not preference.preferred_time_slots:
        return courses

    allowed: Dict[str, Set[int]] = {}
    for slot in preference.preferred_time_slots:
        if slot.day:
            allowed.setdefault(slot.day, set()).update(slot.periods)

    def fits(course: Course) -> bool:
        if not course.schedule_slots:
            return False
        for slot in course.schedule_slots:
            allowed_periods = allowed.get(slot.day)
            if allowed_periods is None or not allowed_periods.issuperset(slot.periods):
                return False
        return True

    return [course for course in courses if fits(course)]

# --- Orchestration ---

class TimetableRecommender:
    """
    Connects catalog filtering, mandatory validation and the combination
    search, and turns raw course lists into annotated timetables.
    """

    def __init__(self, catalog: CourseCatalog, max_recommendations: int = MAX_RECOMMENDATIONS):
        self.catalog = catalog
        self.max_recommendations = max_recommendations

    def recommend(self, request: RecommendationRequest, timeout_seconds: Optional[float] = None) -> List[RecommendedTimetable]:
        student = request.student
        settings = request.credit_settings
        target_types = settings.target_types()
        logger.info("Generating recommendations for student %s (target types: %s)", student.student_id or "<anonymous>", target_types)
        validate_search_config(settings, self.max_recommendations)

        if not self.catalog.courses:
            logger.warning("The course catalog is empty; nothing to recommend.")
            return []

        candidate_pool = prepare_candidate_courses(self.catalog, request.selection)
        logger.debug("Candidate pool after taken/retake filtering: %d course(s)", len(candidate_pool))

        mandatory_courses = get_and_validate_mandatory_courses(candidate_pool, request.selection)
        logger.info("Mandatory/retake courses placed: %d", len(mandatory_courses))

        time_filtered_pool = filter_by_time_preferences(candidate_pool, request.time_preference)
        logger.debug("Candidate pool after time-preference filtering: %d course(s)", len(time_filtered_pool))

        solver = CombinationSolver(student, settings)
        raw_timetables = solver.generate(
            mandatory_courses, time_filtered_pool, target_types,
            wanted=self.max_recommendations, timeout_seconds=timeout_seconds,
        )

        recommendations = [
            self._to_recommended(i + 1, timetable, student, settings)
            for i, timetable in enumerate(raw_timetables)
        ]

        if not recommendations and mandatory_courses:
            if meets_all_credit_criteria(mandatory_courses, settings, solver.classify):
                recommendations.append(self._to_recommended(0, mandatory_courses, student, settings))
                logger.info("Recommending the mandatory-only timetable.")

        if not recommendations:
            logger.warning("No timetable satisfies the requested constraints.")
        else:
            logger.info("Returning %d recommended timetable(s).", len(recommendations))
        return recommendations

    def _to_recommended(self, timetable_id: int, courses: Timetable, student: StudentProfile,
                        settings: CreditSettings) -> RecommendedTimetable:
        classify = lambda course: classify_course(course, student, settings)
        credits_by_type = calculate_credits_by_type(courses, classify, settings)
        scheduled = [
            ScheduledCourse(
                course_code=course.course_code,
                course_name=course.course_name,
                course_type=classify(course),
                credits=course.credits,
                professor=course.professor,
                classroom=course.classroom,
                remarks=course.remarks,
                actual_class_times=list(course.schedule_slots),
            )
            for course in courses
        ]
        return RecommendedTimetable(
            timetable_id=timetable_id,
            scheduled_courses=scheduled,
            credits_by_type=credits_by_type,
            total_credits=total_credits(credits_by_type),
        )

if __name__ == '__main__':
    import sys
    from data_loader import load_catalog_from_json, load_request_from_json

    logging.basicConfig(level=logging.INFO)
    if len(sys.argv) != 3:
        print("Usage: python recommender.py <catalog.json> <request.json>")
        sys.exit(2)
    try:
        catalog = load_catalog_from_json(sys.argv[1])
        request = load_request_from_json(sys.argv[2])
        for recommendation in TimetableRecommender(catalog).recommend(request):
            print(recommendation.model_dump_json(indent=2))
    except MandatoryCourseConflictError as e:
        print(f"Mandatory courses conflict: {e}")
    except (ValueError, FileNotFoundError) as e:
        print(e)
