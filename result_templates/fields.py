"""
Dynamic fields a report card template can bind to.

A `dynamic` element names one of these keys in `metadata.field`; the value
is filled in from the student's report data when the card is generated.
"""
from collections import namedtuple

DynamicField = namedtuple('DynamicField', 'key label category description example')

CATEGORIES = ('student', 'school', 'period', 'result', 'attendance', 'computed')

DYNAMIC_FIELDS = [
    # Student information
    DynamicField('student_name', 'Student Name', 'student', 'Full name of the student', 'Ifunanya Kelemade'),
    DynamicField('admission_number', 'Admission Number', 'student',
                 'Unique student admission/registration number', 'STU/2020/1004'),
    DynamicField('gender', 'Gender', 'student', "Student's gender", 'Female'),
    DynamicField('date_of_birth', 'Date of Birth', 'student', "Student's birth date", '15th March, 2012'),
    DynamicField('student_photo', 'Student Photo', 'student', 'Passport photograph of the student', '[Photo]'),
    DynamicField('age', 'Age', 'student', "Student's current age", '12'),

    # School information
    DynamicField('school_name', 'School Name', 'school', 'Official name of the school',
                 'Step to Success Demo School'),
    DynamicField('school_address', 'School Address', 'school', 'Physical address of the school',
                 '5 Blessing Okoh Way, Benin City'),
    DynamicField('school_motto', 'School Motto', 'school', "School's motto or tagline", 'Excellence Personified'),
    DynamicField('school_logo', 'School Logo', 'school', "School's official logo/emblem", '[Logo]'),
    DynamicField('school_phone', 'School Phone', 'school', "School's contact phone number", '08012345678'),
    DynamicField('school_email', 'School Email', 'school', "School's official email address", 'info@school.edu.ng'),
    DynamicField('school_website', 'School Website', 'school', "School's website URL", 'www.school.edu.ng'),
    DynamicField('school_stamp', 'School Stamp', 'school', 'Official school stamp/seal', '[Stamp]'),

    # Period / session
    DynamicField('academic_session', 'Academic Session', 'period', 'Current academic year/session', '2024/2025'),
    DynamicField('term_name', 'Term Name', 'period', 'Current term (First, Second, Third)', 'First Term'),
    DynamicField('class_name', 'Class Name', 'period', "Student's current class", 'Primary 4'),
    DynamicField('class_section', 'Class Section/Arm', 'period', 'Class section or arm (e.g., A, B, Gold)', 'A'),
    DynamicField('class_teacher', 'Class Teacher', 'period', 'Name of the class teacher', 'Mrs. Johnson'),
    DynamicField('students_in_class', 'Number in Class', 'period', 'Total number of students in the class', '35'),
    DynamicField('vacation_date', 'Vacation Date', 'period', 'Date when term vacation begins', '15th December, 2024'),
    DynamicField('resumption_date', 'Resumption Date', 'period', 'Date when next term begins', '10th January, 2025'),
    DynamicField('next_term_date', 'Next Term Date', 'period', 'Expected date for next term', '10th Jan, 2025'),

    # Results
    DynamicField('total_score', 'Total Score', 'result', 'Sum of all subject scores', '752'),
    DynamicField('total_obtainable', 'Total Obtainable', 'result', 'Maximum possible total score', '1000'),
    DynamicField('average_score', 'Average Score', 'result', 'Average of all subject scores', '75.2%'),
    DynamicField('overall_grade', 'Overall Grade', 'result', 'Final grade based on average', 'A'),
    DynamicField('position', 'Class Position', 'result', "Student's rank/position in class", '2nd'),
    DynamicField('result_status', 'Result Status', 'result', 'Pass/Fail/Promoted status', 'Passed'),
    DynamicField('teacher_comment', "Teacher's Comment", 'result', "Class teacher's remark", 'A very promising child'),
    DynamicField('admin_comment', "Principal's Comment", 'result', "Principal/Head Master's remark",
                 'Excellent performance'),
    DynamicField('grading_scale', 'Grading Scale', 'result', "School's grading scale/legend",
                 'A: 70-100, B: 60-69...'),

    # Attendance
    DynamicField('days_present', 'Days Present', 'attendance', 'Number of days student was present', '85'),
    DynamicField('days_absent', 'Days Absent', 'attendance', 'Number of days student was absent', '17'),
    DynamicField('total_days', 'Total Days in Term', 'attendance', 'Total number of school days in term', '102'),
    DynamicField('attendance_percentage', 'Attendance Percentage', 'attendance', 'Percentage of attendance', '83%'),

    # Filled at generation time
    DynamicField('subjects_table', 'Subjects Table', 'computed', 'Dynamic table of subject scores', '[Table]'),
    DynamicField('affective_traits', 'Affective Traits', 'computed',
                 'Behavioral/character assessment ratings', '[Traits Table]'),
    DynamicField('psychomotor_skills', 'Psychomotor Skills', 'computed', 'Motor skills assessment ratings',
                 '[Skills Table]'),
    DynamicField('cumulative_average', 'Cumulative Average', 'computed', 'Average across multiple terms', '72.5%'),
]

_FIELDS_BY_KEY = {f.key: f for f in DYNAMIC_FIELDS}


def is_known_field(key) -> bool:
    return isinstance(key, str) and key in _FIELDS_BY_KEY


def get_fields_by_category(category):
    return [f for f in DYNAMIC_FIELDS if f.category == category]


def grouped_fields():
    """Registry as JSON-ready dicts keyed by category"""
    return {category: [f._asdict() for f in get_fields_by_category(category)] for category in CATEGORIES}


def sample_values():
    """Field key -> example value, used for template previews"""
    return {f.key: f.example for f in DYNAMIC_FIELDS}
