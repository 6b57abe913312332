from schemas import Course, TimeSlot, CourseType
from constraints import (
    has_time_conflict,
    has_duplicate_course,
    calculate_credits_by_type,
    total_credits,
    meets_all_credit_criteria,
)


def by_tag(course):
    return course.generalized_type


class TestHasTimeConflict:
    def test_disjoint_courses_do_not_conflict(self, make_course):
        a = make_course("A", slots={"Mon": [1, 2, 3]})
        b = make_course("B", slots={"Mon": [4, 5], "Tue": [1, 2, 3]})
        assert not has_time_conflict([a, b])

    def test_shared_day_and_period_conflicts(self, make_course):
        x = make_course("X", slots={"Mon": [1, 2]})
        y = make_course("Y", slots={"Mon": [2]})
        assert has_time_conflict([x, y])

    def test_same_period_on_different_days_is_fine(self, make_course):
        a = make_course("A", slots={"Mon": [1]})
        b = make_course("B", slots={"Tue": [1]})
        assert not has_time_conflict([a, b])

    def test_conflict_found_among_many_courses(self, make_course):
        courses = [make_course(f"C{i}", slots={"Wed": [i]}) for i in range(1, 10)]
        courses.append(make_course("LATE", slots={"Wed": [9]}))
        assert has_time_conflict(courses)

    def test_courses_without_slots_never_conflict(self, make_course):
        a = make_course("A", slots={"Mon": [1]})
        online = make_course("ONLINE")
        assert not has_time_conflict([a, online, online])

    def test_fewer_than_two_courses(self, make_course):
        assert not has_time_conflict([])
        assert not has_time_conflict(None)
        assert not has_time_conflict([make_course("A", slots={"Mon": [1]})])

    def test_malformed_slots_are_skipped(self):
        missing_day = Course(course_code="A", schedule_slots=[TimeSlot(day=None, periods=[1, 2])])
        negative = Course(course_code="B", schedule_slots=[TimeSlot(day="Mon", periods=[-1])])
        other = Course(course_code="C", schedule_slots=[TimeSlot(day="Mon", periods=[-1, 1, 2])])
        assert not has_time_conflict([missing_day, negative, other])

    def test_periods_after_fifteen_are_tracked(self):
        evening = Course(course_code="B", schedule_slots=[TimeSlot(day="Mon", periods=[40])])
        other = Course(course_code="C", schedule_slots=[TimeSlot(day="Mon", periods=[1, 2, 40])])
        assert has_time_conflict([evening, other])

    def test_late_periods_on_different_days_are_fine(self, make_course):
        a = make_course("A", slots={"Mon": [16, 17]})
        b = make_course("B", slots={"Tue": [16, 17]})
        assert not has_time_conflict([a, b])

    def test_period_fifteen_is_tracked(self, make_course):
        a = make_course("A", slots={"Fri": [14, 15]})
        b = make_course("B", slots={"Fri": [15]})
        assert has_time_conflict([a, b])


def test_has_duplicate_course_uses_group_id(make_course):
    a = make_course("V41010101", group_id="V410101")
    b = make_course("V41010103", group_id="V410101")
    c = make_course("M01201101")
    assert has_duplicate_course([a, b])
    assert not has_duplicate_course([a, c])


class TestCreditAggregation:
    def test_seeded_with_configured_types(self, make_course, make_settings):
        settings = make_settings({"major": (3, 6), "general_education": (2, 2)})
        credits = calculate_credits_by_type([make_course("A", 3, generalized_type="major")], by_tag, settings)
        assert credits == {"major": 3, "general_education": 0}

    def test_unconfigured_type_gets_its_own_bucket(self, make_course, make_settings):
        settings = make_settings({"major": (0, 6)})
        courses = [make_course("A", 3, generalized_type="major"), make_course("T", 2, generalized_type="teaching_certificate")]
        credits = calculate_credits_by_type(courses, by_tag, settings)
        assert credits == {"major": 3, "teaching_certificate": 2}
        assert total_credits(credits) == 5

    def test_unclassifiable_courses_land_in_other(self, make_course):
        credits = calculate_credits_by_type([make_course("A", 2)], lambda course: None)
        assert credits == {CourseType.OTHER.value: 2}

    def test_negative_credits_count_as_zero(self, make_course):
        credits = calculate_credits_by_type([make_course("A", -3, generalized_type="major")], by_tag)
        assert credits == {"major": 0}


class TestMeetsAllCreditCriteria:
    def test_within_all_ranges(self, make_course, make_settings):
        settings = make_settings({"major": (3, 6), "general_education": (2, 2)}, min_total=5, max_total=8)
        timetable = [make_course("A", 3, generalized_type="major"), make_course("C", 2, generalized_type="general_education")]
        assert meets_all_credit_criteria(timetable, settings, by_tag)

    def test_type_below_minimum(self, make_course, make_settings):
        settings = make_settings({"major": (6, 9)})
        assert not meets_all_credit_criteria([make_course("A", 3, generalized_type="major")], settings, by_tag)

    def test_total_above_maximum(self, make_course, make_settings):
        settings = make_settings({"major": (0, 9)}, max_total=5)
        timetable = [make_course("A", 3, generalized_type="major"), make_course("B", 3, generalized_type="major")]
        assert not meets_all_credit_criteria(timetable, settings, by_tag)

    def test_other_credits_count_toward_total(self, make_course, make_settings):
        settings = make_settings({"major": (3, 3)}, min_total=5)
        timetable = [make_course("A", 3, generalized_type="major"), make_course("O", 2)]
        assert meets_all_credit_criteria(timetable, settings, by_tag)

    def test_empty_timetable(self, make_settings):
        assert meets_all_credit_criteria([], make_settings({"major": (0, 6)}), by_tag)
        assert not meets_all_credit_criteria([], make_settings({"major": (0, 6)}, min_total=3), by_tag)
        assert not meets_all_credit_criteria([], make_settings({"major": (3, 6)}), by_tag)
