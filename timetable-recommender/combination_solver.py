import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from schemas import Course, CreditRange, CreditSettings, StudentProfile
from classifier import classify_course
from constraints import (
    Timetable,
    Classifier,
    has_time_conflict,
    has_duplicate_course,
    calculate_credits_by_type,
    meets_all_credit_criteria,
)
from errors import ConfigurationError

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 5

@dataclass
class SearchContext:
    """Per-call search state threaded explicitly through the recursion."""
    wanted: int
    timeout_seconds: Optional[float] = None
    start_time: Optional[float] = None
    results: List[Timetable] = field(default_factory=list)
    steps: int = 0
    search_terminated: bool = False

    def __post_init__(self):
        if self.start_time is None:
            self.start_time = time.monotonic()

    def is_done(self) -> bool:
        return len(self.results) >= self.wanted or self.search_terminated

    def check_budget(self) -> bool:
        """Marks the search terminated once the wall-clock budget is spent."""
        if self.timeout_seconds is None or self.search_terminated:
            return self.search_terminated
        if time.monotonic() - self.start_time > self.timeout_seconds:
            logger.warning("Search budget of %.1fs exhausted after %d steps with %d timetable(s) found.",
                           self.timeout_seconds, self.steps, len(self.results))
            self.search_terminated = True
        return self.search_terminated

def validate_search_config(settings: CreditSettings, wanted: int) -> None:
    """
    Rejects unusable input before any search is attempted.
    """
    if wanted <= 0:
        raise ConfigurationError(f"Number of wanted timetables must be positive, got {wanted}.")
    for course_type, credit_range in settings.credit_goals_per_type.items():
        if credit_range.min < 0:
            raise ConfigurationError(f"Credit range for '{course_type}' has a negative minimum ({credit_range.min}).")
        if credit_range.max < credit_range.min:
            raise ConfigurationError(
                f"Credit range for '{course_type}' is inverted: max {credit_range.max} < min {credit_range.min}.")
    min_total, max_total = settings.min_total_credits, settings.max_total_credits
    if min_total is not None and min_total < 0:
        raise ConfigurationError(f"Minimum total credits cannot be negative, got {min_total}.")
    if min_total is not None and max_total is not None and max_total < min_total:
        raise ConfigurationError(f"Total credit bounds are inverted: max {max_total} < min {min_total}.")

class CombinationSolver:
    """
    The engine that composes elective courses onto a base timetable, one type
    bucket at a time, until enough conflict-free, credit-satisfying
    timetables are found.
    """

    def __init__(self, student: StudentProfile, settings: CreditSettings, classify: Optional[Classifier] = None):
        """
        Binds the student and credit settings the search is run for. The
        classifier defaults to the per-student type resolution.
        """
        self.student = student
        self.settings = settings
        self.classify: Classifier = classify or (lambda course: classify_course(course, student, settings))

    def generate(self, base: Timetable, pool: List[Course], target_types: Optional[List[str]] = None,
                 wanted: int = MAX_RECOMMENDATIONS, timeout_seconds: Optional[float] = None) -> List[Timetable]:
        """
        The main public entry point. Returns up to `wanted` timetables, each
        the base followed by the chosen electives, in traversal order.
        """
        validate_search_config(self.settings, wanted)
        if target_types is None:
            target_types = self.settings.target_types()

        electives_by_type = self._group_electives_by_type(base, pool)
        logger.debug("Elective pool by type: %s", {t: len(c) for t, c in electives_by_type.items()})

        context = SearchContext(wanted=wanted, timeout_seconds=timeout_seconds)
        self._search(context, target_types, 0, list(base), electives_by_type)

        logger.info("Search finished: %d timetable(s) found in %d steps.", len(context.results), context.steps)
        return context.results

    def _group_electives_by_type(self, base: Timetable, pool: List[Course]) -> Dict[str, List[Course]]:
        """
        Drops courses already in the base (by identity key) and buckets the
        rest by their resolved type, keeping pool order within each bucket.
        """
        base_keys = {course.identity_key for course in base}
        electives_by_type: Dict[str, List[Course]] = {}
        for course in pool:
            if course.identity_key in base_keys:
                continue
            electives_by_type.setdefault(self.classify(course), []).append(course)
        return electives_by_type

    def _search(self, context: SearchContext, target_types: List[str], type_index: int,
                current: Timetable, electives_by_type: Dict[str, List[Course]]) -> None:
        """
        The core recursive step. Each call owns `current`; extensions are
        built as new lists so sibling branches never see each other's picks.
        """
        context.steps += 1
        if context.is_done() or context.check_budget():
            return

        if type_index >= len(target_types):
            if meets_all_credit_criteria(current, self.settings, self.classify):
                context.results.append(list(current))
            return

        current_type = target_types[type_index]
        original_range = self.settings.credit_goals_per_type.get(current_type)
        if original_range is None:
            self._search(context, target_types, type_index + 1, current, electives_by_type)
            return

        already = calculate_credits_by_type(current, self.classify, self.settings).get(current_type, 0)
        remaining = CreditRange(min=max(0, original_range.min - already), max=original_range.max - already)
        if remaining.max < 0:
            return

        type_pool = electives_by_type.get(current_type, [])
        partial_combinations = self.find_partial_combinations(type_pool, remaining, context)

        # No partial at all (not even the empty one) means this branch cannot meet the minimum.
        if not partial_combinations:
            return

        for partial in partial_combinations:
            if context.is_done():
                return
            next_timetable = current + partial
            if has_duplicate_course(next_timetable) or has_time_conflict(next_timetable):
                continue
            self._search(context, target_types, type_index + 1, next_timetable, electives_by_type)

    def find_partial_combinations(self, pool: List[Course], credit_range: CreditRange,
                                  context: Optional[SearchContext] = None) -> List[Timetable]:
        """
        Every conflict-free, duplicate-free subset of the pool whose credit sum
        lies within the range, enumerated by index-ordered depth-first search.
        With a search context, enumeration stops early once its budget is spent.
        """
        result: List[Timetable] = []
        self._find_partial_recursive(pool, credit_range, 0, [], 0, result, context)
        if credit_range.min == 0 and not any(not combination for combination in result):
            result.append([])
        return result

    def _find_partial_recursive(self, pool: List[Course], credit_range: CreditRange, start_index: int,
                                combination: Timetable, credits: int, result: List[Timetable],
                                context: Optional[SearchContext] = None) -> None:
        if credit_range.min <= credits <= credit_range.max:
            result.append(list(combination))

        if start_index >= len(pool) or credits >= credit_range.max:
            return

        for i in range(start_index, len(pool)):
            if context is not None and context.check_budget():
                return
            course = pool[i]
            course_credits = max(course.credits, 0)
            if credits + course_credits > credit_range.max:
                continue
            if any(chosen.identity_key == course.identity_key for chosen in combination):
                continue

            combination.append(course)
            try:
                if not has_time_conflict(combination):
                    self._find_partial_recursive(pool, credit_range, i + 1, combination, credits + course_credits,
                                                result, context)
            finally:
                combination.pop()
