import logging
import streamlit as st
from schemas import (
    CreditRange, CreditSettings, CourseSelection, DoubleMajorType,
    RecommendationRequest, StudentProfile, TimePreference, CourseType
)
from data_loader import load_catalog_from_excel, parse_schedule_field, parse_comma_separated_field
from recommender import TimetableRecommender
from combination_solver import MAX_RECOMMENDATIONS
from display_utils import format_timetable_for_display, summarize_credits
from errors import MandatoryCourseConflictError

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

st.set_page_config(
    page_title="Timetable Recommender",
    page_icon="📅",
    layout="wide"
)

st.title("📅 Timetable Recommender")
st.markdown("""
<style>
/* This targets all <label> elements to make them larger */
label {
    font-size: 1.1rem !important;
}
/* This makes all tables expand to the full width of their container */
table {
    width: 100% !important;
}
</style>
""", unsafe_allow_html=True)

with st.sidebar:
    st.header("⚙️ Configuration")

    uploaded_file = st.file_uploader(
        "Upload your course catalog",
        type=["xlsx"],
        help="An Excel file with a 'Courses' sheet."
    )

    st.subheader("Student")
    major = st.text_input("Primary major")
    double_major = st.text_input("Secondary major")
    double_major_type = st.selectbox(
        "Secondary major type",
        options=list(DoubleMajorType),
        index=list(DoubleMajorType).index(DoubleMajorType.NONE),
        format_func=lambda x: x.value,
    )

    st.subheader("Courses")
    mandatory = st.text_input("Mandatory course codes (comma separated)")
    retake = st.text_input("Retake course codes (comma separated)")
    taken = st.text_input("Already taken course codes (comma separated)")

    st.subheader("Credit goals")
    credit_goals = {}
    for course_type in CourseType:
        if course_type == CourseType.OTHER:
            continue
        if st.checkbox(f"Include {course_type.value}", value=course_type in (CourseType.MAJOR, CourseType.GENERAL_EDUCATION)):
            low, high = st.slider(f"{course_type.value} credits", 0, 24, (3, 9), key=f"range_{course_type.value}")
            credit_goals[course_type.value] = CreditRange(min=low, max=high)
    min_total, max_total = st.slider("Total credits", 0, 30, (12, 21))

    preferred = st.text_input(
        "Allowed time windows",
        help="Leave empty to allow any time. Format: Mon:1,2,3;Wed:4,5"
    )

    wanted = st.number_input("Number of timetables", min_value=1, max_value=20, value=MAX_RECOMMENDATIONS)
    timeout = st.number_input(
        label="Search timeout (seconds)",
        min_value=1,
        max_value=600,
        value=30,
        help="The search stops with whatever it found once this budget is spent."
    )

    generate_button = st.button("Generate Timetables", type="primary")

if generate_button:
    if uploaded_file:
        request = RecommendationRequest(
            student=StudentProfile(major=major or None, double_major=double_major or None, double_major_type=double_major_type),
            selection=CourseSelection(
                taken_courses=parse_comma_separated_field(taken),
                mandatory_courses=parse_comma_separated_field(mandatory),
                retake_courses=parse_comma_separated_field(retake),
            ),
            credit_settings=CreditSettings(
                credit_goals_per_type=credit_goals,
                min_total_credits=min_total,
                max_total_credits=max_total,
            ),
            time_preference=TimePreference(preferred_time_slots=parse_schedule_field(preferred)),
        )
        with st.spinner("Searching for timetables... This may take a moment."):
            try:
                catalog = load_catalog_from_excel(uploaded_file)
                recommender = TimetableRecommender(catalog, max_recommendations=int(wanted))
                recommendations = recommender.recommend(request, timeout_seconds=float(timeout))

                if recommendations:
                    st.success(f"🎉 Found {len(recommendations)} timetable(s)!")
                    st.session_state['recommendations'] = recommendations
                else:
                    st.error("No timetable satisfies the requested credits and time windows.")
                    if 'recommendations' in st.session_state: del st.session_state['recommendations']
            except MandatoryCourseConflictError as e:
                st.error(f"Your mandatory courses cannot be taken together: {e}")
            except (ValueError, FileNotFoundError) as e:
                st.error(f"An error occurred while generating timetables: {e}")
    else:
        st.warning("Please upload your course catalog first.")

if 'recommendations' in st.session_state:
    recommendations = st.session_state['recommendations']

    st.header("🔍 Recommended Timetables")
    labels = [
        "Mandatory courses only" if r.timetable_id == 0 else f"Timetable {r.timetable_id} ({r.total_credits} credits)"
        for r in recommendations
    ]
    selected = st.selectbox("Timetable", options=range(len(recommendations)), format_func=lambda i: labels[i])
    recommendation = recommendations[selected]

    col1, col2 = st.columns([3, 1])
    with col1:
        grid = format_timetable_for_display(recommendation)
        if grid.empty:
            st.warning("None of these courses has a scheduled meeting time.")
        else:
            st.markdown(grid.to_html(escape=False), unsafe_allow_html=True)
    with col2:
        st.subheader("Credits")
        st.dataframe(summarize_credits(recommendation), hide_index=True)

    st.download_button(
        label="Download Timetable as JSON",
        data=recommendation.model_dump_json(indent=2),
        file_name=f"timetable_{recommendation.timetable_id}.json",
        mime="application/json"
    )
