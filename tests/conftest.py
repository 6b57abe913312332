import pytest
from schemas import Course, CreditRange, CreditSettings, StudentProfile, TimeSlot, DoubleMajorType


def _make_course(code, credits=3, slots=None, generalized_type=None, specific_major=None, group_id=None, name=None):
    """slots is a dict like {"Mon": [1, 2]}."""
    return Course(
        course_code=code,
        course_name=name or code,
        credits=credits,
        generalized_type=generalized_type,
        specific_major=specific_major,
        group_id=group_id,
        schedule_slots=[TimeSlot(day=day, periods=periods) for day, periods in (slots or {}).items()],
    )


@pytest.fixture
def make_course():
    return _make_course


@pytest.fixture
def student():
    return StudentProfile(
        student_id="20210001",
        grade=4,
        major="AI Data Convergence",
        double_major="Global Business",
        double_major_type=DoubleMajorType.DOUBLE_MAJOR,
    )


@pytest.fixture
def make_settings():
    def _make_settings(goals, min_total=None, max_total=None, order=None):
        return CreditSettings(
            credit_goals_per_type={t: CreditRange(min=lo, max=hi) for t, (lo, hi) in goals.items()},
            course_type_combination=order,
            min_total_credits=min_total,
            max_total_credits=max_total,
        )
    return _make_settings
