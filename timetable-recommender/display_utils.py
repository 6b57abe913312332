import pandas as pd
from schemas import RecommendedTimetable
from typing import Dict, List

# This list defines the column order of the weekly grid
DAY_ORDER = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
# The grid always shows at least this many periods
MAX_PERIOD = 15

def format_timetable_for_display(timetable: RecommendedTimetable) -> pd.DataFrame:
    """
    Transforms a recommended timetable into a pivot table (grid) with one
    row per period and one column per day. Days outside the usual week are
    appended after Saturday.
    """
    processed_data = []
    for course in timetable.scheduled_courses:
        cell_content = (
            f"<b>{course.course_name} ({course.course_code})</b><br>"
            f"{course.course_type} · {course.credits}cr<br>"
            f"{course.professor or 'N/A'}<br>"
            f"{course.classroom or 'N/A'}"
        )
        for slot in course.actual_class_times:
            if not slot.day:
                continue
            for period in slot.periods:
                processed_data.append({"day": slot.day, "period": period, "content": cell_content})

    if not processed_data:
        return pd.DataFrame()

    df = pd.DataFrame(processed_data).drop_duplicates()

    extra_days = sorted(set(df['day']) - set(DAY_ORDER))
    day_order = DAY_ORDER + extra_days
    last_period = max(MAX_PERIOD, int(df['period'].max()))

    pivot_table = df.pivot_table(
        index='period',
        columns='day',
        values='content',
        aggfunc='first'
    )
    pivot_table = pivot_table.reindex(index=range(1, last_period + 1), columns=day_order).fillna('')
    pivot_table.index.name = 'period'
    return pivot_table

def summarize_credits(timetable: RecommendedTimetable) -> pd.DataFrame:
    """A two-column table of credits per type, followed by the total."""
    rows: List[Dict[str, object]] = [
        {"type": course_type, "credits": credits}
        for course_type, credits in timetable.credits_by_type.items()
    ]
    rows.append({"type": "total", "credits": timetable.total_credits})
    return pd.DataFrame(rows, columns=["type", "credits"])
