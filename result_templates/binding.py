"""
Fill a template with one student's report data.

`build_field_values` resolves every dynamic field for a report; `bind_template`
walks the elements and attaches a `value` (dynamic text, images) or the
`cells` grid (tables). Nothing here draws; the result is plain JSON that a
renderer or the editor preview can consume.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from result_templates.fields import sample_values

IMAGE_FIELDS = ('school_logo', 'student_photo', 'school_stamp')
CHECK_MARK = '✓'


@dataclass
class GradeBand:
    grade: str
    min_score: float
    max_score: float
    remark: str = ''


@dataclass
class SubjectResult:
    subject: str
    total: float = 0
    grade: Optional[str] = None
    remark: Optional[str] = None
    component_scores: Dict[str, float] = field(default_factory=dict)  # component name -> score
    teacher_comment: Optional[str] = None
    admin_comment: Optional[str] = None
    affective_traits: Dict[str, Any] = field(default_factory=dict)  # trait -> rating
    psychomotor_skills: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ReportData:
    student_name: str
    school: Dict[str, Any] = field(default_factory=dict)
    admission_number: Optional[str] = None
    roll_number: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    student_photo: Optional[str] = None
    class_name: Optional[str] = None
    class_section: Optional[str] = None
    class_teacher: Optional[str] = None
    session_name: Optional[str] = None
    term_name: Optional[str] = None
    vacation_date: Optional[str] = None
    resumption_date: Optional[str] = None
    next_term_date: Optional[str] = None
    results: List[SubjectResult] = field(default_factory=list)
    grading_scale: List[GradeBand] = field(default_factory=list)
    total_score: float = 0
    total_obtainable: Optional[float] = None
    average: Any = 0
    overall_grade: Optional[str] = None
    position: Optional[str] = None
    students_in_class: Optional[int] = None
    result_status: Optional[str] = None
    cumulative_average: Any = None
    days_present: Optional[int] = None
    days_absent: Optional[int] = None
    total_days: Optional[int] = None


def _num(value):
    """752.0 -> '752', 75.25 -> '75.25'"""
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _or(value, fallback='N/A'):
    return fallback if value in (None, '') else str(value)


def age_on(dob, today=None):
    if not dob:
        return None
    today = today or date.today()
    return today.year - dob.year - ((today.month, today.day) < (dob.month, dob.day))


def format_grading_scale(bands, display_type=None) -> str:
    if display_type == 'list':
        return '\n'.join(f"{b.grade}: {_num(b.min_score)}-{_num(b.max_score)}% ({b.remark})" for b in bands)
    return ', '.join(f"{b.grade}: {_num(b.min_score)}-{_num(b.max_score)}" for b in bands)


def build_field_values(report: ReportData) -> Dict[str, str]:
    """Every dynamic field key resolvable from `report`, as display strings"""
    school = report.school or {}
    first = report.results[0] if report.results else None
    attendance_pct = ''
    if report.total_days:
        attendance_pct = f"{round((report.days_present or 0) * 100 / report.total_days)}%"

    return {
        'student_name': report.student_name or '',
        'admission_number': report.admission_number or report.roll_number or 'N/A',
        'gender': _or(report.gender),
        'date_of_birth': report.date_of_birth.strftime('%d %B, %Y') if report.date_of_birth else '',
        'age': _num(age_on(report.date_of_birth)),
        'student_photo': report.student_photo or '',
        'school_name': school.get('name') or '',
        'school_address': school.get('address') or '',
        'school_motto': school.get('motto') or '',
        'school_logo': school.get('logo') or '',
        'school_phone': school.get('phone') or '',
        'school_email': school.get('email') or '',
        'school_website': school.get('website') or '',
        'school_stamp': school.get('stamp') or '',
        'academic_session': _or(report.session_name),
        'term_name': _or(report.term_name),
        'class_name': _or(report.class_name),
        'class_section': _or(report.class_section),
        'class_teacher': report.class_teacher or '',
        'students_in_class': _or(report.students_in_class),
        'vacation_date': report.vacation_date or '',
        'resumption_date': report.resumption_date or '',
        'next_term_date': report.next_term_date or '',
        'total_score': _num(report.total_score),
        'total_obtainable': _num(report.total_obtainable),
        'average_score': f"{_num(report.average)}%",
        'overall_grade': report.overall_grade or '',
        'position': _or(report.position),
        'result_status': report.result_status or '',
        'teacher_comment': (first.teacher_comment if first else None) or '',
        'admin_comment': (first.admin_comment if first else None) or '',
        'grading_scale': format_grading_scale(report.grading_scale),
        'days_present': _num(report.days_present),
        'days_absent': _num(report.days_absent),
        'total_days': _num(report.total_days),
        'attendance_percentage': attendance_pct,
        'cumulative_average': f"{_num(report.cumulative_average or 0)}%",
    }


def _component_score(result, header):
    for name, score in result.component_scores.items():
        name = name.upper()
        if name == header or name in header or header in name:
            return _num(score)
    return '-'


def subjects_cells(headers, results, rows):
    grid = []
    for result in results[:rows]:
        row = []
        for c, raw_header in enumerate(headers):
            header = (raw_header or '').upper()
            if c == 0 or 'SUBJECT' in header:
                row.append(result.subject or '')
            elif header == 'TOTAL':
                row.append(_num(result.total or 0))
            elif header == 'GRADE':
                row.append(result.grade or '-')
            elif header in ('REMARK', 'REMARKS'):
                row.append(result.remark or '-')
            else:
                row.append(_component_score(result, header))
        grid.append(row)
    return grid


def ratings_cells(headers, names, ratings, rows):
    """Trait/skill rows; a tick under the matching rating column on 1-5 scales"""
    grid = []
    cols = len(headers)
    for name in names[:rows]:
        rating = ratings.get(name)
        row = [name]
        for header in headers[1:]:
            if cols > 2:
                row.append(CHECK_MARK if rating is not None and str(rating) == str(header) else '')
            else:
                row.append('' if rating is None else str(rating))
        grid.append(row)
    return grid


def _row_count(value):
    try:
        return max(int(value or 0), 0)
    except (TypeError, ValueError):
        return 0


def table_cells(element, report: ReportData):
    meta = element.metadata
    headers = meta.get('headers') or []
    rows = _row_count(meta.get('rows'))
    table_type = meta.get('tableType')
    first = report.results[0] if report.results else None

    if table_type == 'subjects':
        return subjects_cells(headers, report.results, rows)
    if table_type == 'affective':
        return ratings_cells(headers, meta.get('traits') or [], first.affective_traits if first else {}, rows)
    if table_type == 'psychomotor':
        return ratings_cells(headers, meta.get('skills') or [], first.psychomotor_skills if first else {}, rows)
    return []


def bind_template(template, report: ReportData) -> List[Dict[str, Any]]:
    """Elements of `template` in order, with bound values attached"""
    values = build_field_values(report)
    bound = []
    for element in template.elements:
        data = element.to_dict()
        key = element.field_key
        if element.type == 'dynamic':
            if key == 'grading_scale' and element.metadata.get('displayType') == 'list':
                data['value'] = format_grading_scale(report.grading_scale, 'list')
            else:
                data['value'] = values.get(key, '')
        elif element.type in ('image', 'shape') and key in IMAGE_FIELDS:
            data['value'] = values.get(key, '')
        elif element.type == 'table':
            data['headers'] = list(element.metadata.get('headers') or [])
            data['cells'] = table_cells(element, report)
        bound.append(data)
    return bound


DEFAULT_GRADING_SCALE = [
    GradeBand('A', 70, 100, 'Excellent'),
    GradeBand('B', 60, 69, 'Very Good'),
    GradeBand('C', 50, 59, 'Good'),
    GradeBand('D', 45, 49, 'Fair'),
    GradeBand('E', 40, 44, 'Pass'),
    GradeBand('F', 0, 39, 'Fail'),
]


def sample_report(school=None) -> ReportData:
    """Mock report used by template previews, branded with `school` when given"""
    examples = sample_values()
    branding = {
        'name': examples['school_name'],
        'address': examples['school_address'],
        'motto': examples['school_motto'],
        'phone': examples['school_phone'],
        'email': examples['school_email'],
        'website': examples['school_website'],
    }
    if school is not None:
        branding.update({k: v for k, v in school.items() if v})

    traits = {'Punctuality': 5, 'Neatness': 4, 'Politeness': 5, 'Honesty': 4, 'Cooperation': 4,
              'Attentiveness': 3, 'Perseverance': 4, 'Attitude to Work': 5, 'Obedience': 4, 'Self-Control': 4}
    skills = {'Handwriting': 4, 'Sports': 3, 'Games/Sports': 3, 'Drawing': 4, 'Verbal Fluency': 5,
              'Musical Skills': 3, 'Music': 3, 'Crafts': 4, 'Handling Tools': 3, 'Tools Use': 3}
    subjects = [
        ('Mathematics', 18, 17, 45, 'A', 'Excellent'),
        ('English Language', 16, 15, 40, 'A', 'Excellent'),
        ('Basic Science', 14, 13, 35, 'B', 'Very Good'),
        ('Social Studies', 12, 14, 30, 'C', 'Good'),
        ('Civic Education', 15, 16, 38, 'B', 'Very Good'),
    ]
    results = [
        SubjectResult(
            subject=name,
            total=ca1 + ca2 + exam,
            grade=grade,
            remark=remark,
            component_scores={'1st CA': ca1, '2nd CA': ca2, 'Exam': exam},
            affective_traits=traits,
            psychomotor_skills=skills,
        )
        for name, ca1, ca2, exam, grade, remark in subjects
    ]
    results[0].teacher_comment = examples['teacher_comment']
    results[0].admin_comment = examples['admin_comment']
    total = sum(r.total for r in results)

    return ReportData(
        student_name=examples['student_name'],
        school=branding,
        admission_number=examples['admission_number'],
        gender=examples['gender'],
        class_name=examples['class_name'],
        class_section=examples['class_section'],
        class_teacher=examples['class_teacher'],
        session_name=examples['academic_session'],
        term_name=examples['term_name'],
        vacation_date=examples['vacation_date'],
        resumption_date=examples['resumption_date'],
        next_term_date=examples['next_term_date'],
        results=results,
        grading_scale=list(DEFAULT_GRADING_SCALE),
        total_score=total,
        total_obtainable=len(results) * 100,
        average=round(total / len(results), 1),
        overall_grade='B',
        position=examples['position'],
        students_in_class=35,
        result_status=examples['result_status'],
        days_present=85,
        days_absent=17,
        total_days=102,
    )
