"""
Built-in report card templates.

The primary and secondary cards are laid out element by element; the
periodic, cumulative and annual cards reuse one of them with a different
subjects table. All of them are built once, at import time.
"""
from result_templates.layout import TemplateDefinition, TemplateElement


def _style(size=None, color=None, bold=False, **extra):
    style = {}
    if size is not None:
        style['fontSize'] = size
    if bold:
        style['fontWeight'] = 'bold'
    if color is not None:
        style['color'] = color
    style.update(extra)
    return style


def text(x, y, width, height, content, style):
    return TemplateElement('text', x, y, width, height, content=content, style=style)


def dynamic(x, y, width, height, field, style, **metadata):
    return TemplateElement('dynamic', x, y, width, height, style=style, metadata=dict(field=field, **metadata))


def image(x, y, width, height, field, style=None):
    return TemplateElement('image', x, y, width, height, style=style or {},
                           metadata={'field': field, 'isPlaceholder': True})


def shape(x, y, width, height, style, **metadata):
    return TemplateElement('shape', x, y, width, height, style=style, metadata=metadata)


def table(x, y, width, height, style, **metadata):
    return TemplateElement('table', x, y, width, height, style=style, metadata=metadata)


def box(background, border, radius=4):
    return {'backgroundColor': background, 'borderWidth': 1, 'borderColor': border, 'borderRadius': radius}


def stamp_box(border):
    return {'borderWidth': 2, 'borderColor': border, 'borderStyle': 'dashed', 'borderRadius': 4,
            'backgroundColor': 'transparent'}


def table_style(color, size, alt_row=None):
    style = {'borderColor': color, 'borderWidth': 1, 'fontSize': size,
             'headerBgColor': color, 'headerTextColor': '#ffffff'}
    if alt_row:
        style['altRowColor'] = alt_row
    return style


# Primary (blue) card

_BLUE = '#1e40af'
_SLATE = '#1e293b'
_MUTED = '#64748b'
_AMBER = '#92400e'

_INFO_LABEL = _style(10, _MUTED, bold=True)
_INFO_VALUE = _style(12, _SLATE, bold=True)
_SUMMARY_LABEL = _style(10, _AMBER, bold=True)
_SUMMARY_VALUE = _style(14, _SLATE, bold=True)
_ARIAL = 'Arial, sans-serif'

primary_school_template = TemplateDefinition(
    name='Primary School Report Card',
    description='A colorful, easy-to-read template designed for primary school students (Primary 1-6)',
    level='primary',
    elements=[
        # Header
        shape(0, 0, 794, 120, {'backgroundColor': _BLUE, 'borderRadius': 0}, section='header'),
        image(30, 20, 80, 80, 'school_logo'),
        dynamic(130, 25, 534, 35, 'school_name',
                _style(24, '#ffffff', bold=True, fontFamily=_ARIAL, textAlign='center')),
        dynamic(130, 60, 534, 20, 'school_address', _style(11, '#e0e7ff', fontFamily=_ARIAL, textAlign='center')),
        text(130, 95, 534, 25, 'TERMINAL REPORT CARD',
             _style(14, '#fbbf24', bold=True, fontFamily=_ARIAL, textAlign='center', letterSpacing='2px')),
        image(684, 20, 80, 80, 'student_photo', {'borderWidth': 2, 'borderColor': '#ffffff', 'borderRadius': 4}),

        # Student information
        shape(20, 130, 754, 80, box('#f8fafc', '#e2e8f0'), section='student_info'),
        text(30, 140, 100, 18, 'STUDENT NAME:', _INFO_LABEL),
        dynamic(130, 140, 200, 18, 'student_name', _INFO_VALUE),
        text(400, 140, 100, 18, 'ADMISSION NO:', _INFO_LABEL),
        dynamic(500, 140, 150, 18, 'admission_number', _INFO_VALUE),
        text(30, 165, 60, 18, 'CLASS:', _INFO_LABEL),
        dynamic(90, 165, 100, 18, 'class_name', _INFO_VALUE),
        text(200, 165, 50, 18, 'TERM:', _INFO_LABEL),
        dynamic(250, 165, 100, 18, 'term_name', _INFO_VALUE),
        text(400, 165, 70, 18, 'SESSION:', _INFO_LABEL),
        dynamic(470, 165, 150, 18, 'academic_session', _INFO_VALUE),
        text(30, 190, 60, 18, 'GENDER:', _INFO_LABEL),
        dynamic(90, 190, 80, 18, 'gender', _style(12, _SLATE)),

        # Summary
        shape(20, 220, 754, 45, box('#fef3c7', '#fbbf24'), section='summary'),
        text(30, 230, 100, 14, 'TOTAL SCORE:', _SUMMARY_LABEL),
        dynamic(30, 244, 100, 16, 'total_score', _SUMMARY_VALUE),
        text(180, 230, 100, 14, 'AVERAGE:', _SUMMARY_LABEL),
        dynamic(180, 244, 80, 16, 'average_score', _SUMMARY_VALUE),
        text(300, 230, 100, 14, 'POSITION:', _SUMMARY_LABEL),
        dynamic(300, 244, 80, 16, 'position', _SUMMARY_VALUE),
        text(420, 230, 80, 14, 'GRADE:', _SUMMARY_LABEL),
        dynamic(420, 244, 50, 16, 'overall_grade', _SUMMARY_VALUE),
        text(520, 230, 120, 14, 'NO. IN CLASS:', _SUMMARY_LABEL),
        dynamic(520, 244, 50, 16, 'students_in_class', _SUMMARY_VALUE),
        dynamic(650, 230, 100, 30, 'result_status',
                _style(12, '#ffffff', bold=True, backgroundColor='#22c55e', borderRadius=4,
                       textAlign='center', padding=6)),

        # Cognitive domain
        text(20, 275, 200, 20, 'COGNITIVE DOMAIN', _style(12, _BLUE, bold=True, textAlign='left')),
        table(20, 300, 550, 400, table_style(_BLUE, 10, alt_row='#f1f5f9'),
              tableType='subjects', rows=12, cols=9,
              headers=['SUBJECTS', '1ST CA', '2ND CA', 'EXAM', 'TOTAL', 'GRADE', 'POS.', 'HIGH', 'LOW'],
              columnWidths=[120, 45, 45, 50, 50, 45, 40, 45, 45],
              dynamicRows=True),

        # Affective and psychomotor domains
        text(585, 275, 180, 20, 'AFFECTIVE DOMAIN', _style(11, _BLUE, bold=True, textAlign='center')),
        table(585, 300, 185, 180, table_style(_BLUE, 9),
              tableType='affective', rows=8, cols=2,
              headers=['TRAITS', 'RATING'], columnWidths=[140, 45],
              traits=['Punctuality', 'Neatness', 'Politeness', 'Honesty', 'Cooperation',
                      'Attentiveness', 'Perseverance', 'Attitude to Work']),
        text(585, 490, 180, 20, 'PSYCHOMOTOR DOMAIN', _style(11, _BLUE, bold=True, textAlign='center')),
        table(585, 515, 185, 140, table_style(_BLUE, 9),
              tableType='psychomotor', rows=6, cols=2,
              headers=['SKILLS', 'RATING'], columnWidths=[140, 45],
              skills=['Handwriting', 'Sports', 'Drawing', 'Verbal Fluency', 'Musical Skills', 'Handling Tools']),

        # Grading scale
        shape(585, 665, 185, 110, box('#fef3c7', '#fbbf24')),
        text(590, 670, 175, 16, 'GRADING SCALE', _style(10, _AMBER, bold=True, textAlign='center')),
        dynamic(590, 688, 175, 80, 'grading_scale', _style(8, _SLATE, lineHeight=1.4), displayType='list'),

        # Remarks
        shape(20, 710, 550, 60, box('#f8fafc', '#e2e8f0'), section='comments'),
        text(30, 715, 150, 14, "CLASS TEACHER'S REMARKS:", _style(10, _MUTED, bold=True)),
        dynamic(30, 732, 530, 30, 'teacher_comment', _style(11, _SLATE, fontStyle='italic')),
        shape(20, 780, 550, 60, box('#f8fafc', '#e2e8f0'), section='principal_comments'),
        text(30, 785, 150, 14, "PRINCIPAL'S REMARKS:", _style(10, _MUTED, bold=True)),
        dynamic(30, 802, 530, 30, 'admin_comment', _style(11, _SLATE, fontStyle='italic')),

        # Attendance
        shape(585, 785, 185, 55, box('#f0fdf4', '#22c55e')),
        text(590, 790, 175, 14, 'ATTENDANCE', _style(10, '#166534', bold=True, textAlign='center')),
        text(590, 808, 80, 12, 'Days Present:', _style(9, _MUTED)),
        dynamic(670, 808, 30, 12, 'days_present', _style(9, _SLATE, bold=True)),
        text(590, 822, 80, 12, 'Days Absent:', _style(9, _MUTED)),
        dynamic(670, 822, 30, 12, 'days_absent', _style(9, _SLATE, bold=True)),

        # Signatures
        shape(20, 850, 754, 50, {'backgroundColor': '#ffffff', 'borderTop': '1px dashed #cbd5e1'},
              section='signatures'),
        text(30, 875, 180, 12, '____________________', _style(10, _SLATE, textAlign='center')),
        text(30, 890, 180, 12, "Class Teacher's Signature", _style(9, _MUTED, textAlign='center')),
        text(300, 875, 180, 12, '____________________', _style(10, _SLATE, textAlign='center')),
        text(300, 890, 180, 12, "Principal's Signature", _style(9, _MUTED, textAlign='center')),
        text(570, 860, 180, 12, 'School Stamp', _style(9, _MUTED, textAlign='center')),
        shape(620, 875, 80, 80, stamp_box('#e2e8f0'), field='school_stamp', isPlaceholder=True),

        # Footer
        shape(0, 1090, 794, 33, {'backgroundColor': _BLUE}, section='footer'),
        text(30, 1098, 734, 14,
             'This report is computer-generated and valid without signature or stamp. '
             'For inquiries, contact the school.',
             _style(9, '#ffffff', textAlign='center')),
    ],
)


# Secondary (maroon) card

_MAROON = '#7c2d12'
_GOLD = '#fbbf24'
_CREAM = '#fef3c7'

_ROW_LABEL = _style(10, _MAROON, bold=True)
_ROW_VALUE = _style(11, _SLATE)
_ROW_VALUE_BOLD = _style(11, _SLATE, bold=True)
_BAND_LABEL = _style(9, _CREAM, bold=True)
_REMARK_LABEL = _style(9, _MAROON, bold=True)
_DATE_LABEL = _style(9, _MUTED, bold=True)
_DATE_VALUE = _style(9, _SLATE)
_RATING_HEADERS = ['1', '2', '3', '4', '5']
_RATING_WIDTHS = [100, 15, 15, 15, 15, 15]

secondary_school_template = TemplateDefinition(
    name='Secondary School Report Card',
    description='A professional, detailed template for secondary school students (JSS1-SS3)',
    level='junior_secondary',
    elements=[
        # Header
        shape(0, 0, 794, 100, {'backgroundColor': _MAROON, 'borderRadius': 0}, section='header'),
        shape(0, 100, 794, 10, {'backgroundColor': _GOLD}, section='header_accent'),
        image(30, 15, 70, 70, 'school_logo', {'borderRadius': 35, 'borderWidth': 3, 'borderColor': _GOLD}),
        dynamic(110, 20, 574, 30, 'school_name',
                _style(22, '#ffffff', bold=True, fontFamily='Georgia, serif', textAlign='center')),
        dynamic(110, 52, 574, 18, 'school_motto', _style(10, _CREAM, fontStyle='italic', textAlign='center')),
        text(110, 72, 574, 22, "STUDENT'S ACADEMIC REPORT CARD",
             _style(12, _GOLD, bold=True, textAlign='center', letterSpacing='3px')),
        image(700, 15, 70, 85, 'student_photo', {'borderWidth': 2, 'borderColor': _GOLD, 'borderRadius': 4}),

        # Student information, two rows
        shape(20, 120, 754, 30, {'backgroundColor': _CREAM, 'borderWidth': 1, 'borderColor': _GOLD}),
        text(25, 126, 120, 18, 'NAME OF STUDENT:', _ROW_LABEL),
        dynamic(145, 126, 230, 18, 'student_name', _ROW_VALUE_BOLD),
        text(400, 126, 110, 18, 'ADMISSION NO.:', _ROW_LABEL),
        dynamic(510, 126, 100, 18, 'admission_number', _ROW_VALUE_BOLD),
        text(620, 126, 50, 18, 'CLASS:', _ROW_LABEL),
        dynamic(670, 126, 100, 18, 'class_name', _ROW_VALUE_BOLD),
        shape(20, 150, 754, 30, {'backgroundColor': '#ffffff', 'borderWidth': 1, 'borderColor': _GOLD,
                                 'borderTop': 0}),
        text(25, 156, 50, 18, 'TERM:', _ROW_LABEL),
        dynamic(75, 156, 100, 18, 'term_name', _ROW_VALUE),
        text(200, 156, 70, 18, 'SESSION:', _ROW_LABEL),
        dynamic(270, 156, 100, 18, 'academic_session', _ROW_VALUE),
        text(400, 156, 100, 18, 'NO. IN CLASS:', _ROW_LABEL),
        dynamic(500, 156, 50, 18, 'students_in_class', _ROW_VALUE),
        text(570, 156, 100, 18, 'CLASS TEACHER:', _ROW_LABEL),
        dynamic(670, 156, 100, 18, 'class_teacher', _ROW_VALUE),

        # Summary band
        shape(20, 180, 754, 35, {'backgroundColor': _MAROON}, section='summary'),
        text(25, 187, 120, 14, 'TOTAL OBTAINABLE:', _BAND_LABEL),
        dynamic(145, 187, 60, 20, 'total_obtainable', _style(14, '#ffffff', bold=True)),
        text(220, 187, 110, 14, 'TOTAL OBTAINED:', _BAND_LABEL),
        dynamic(330, 187, 60, 20, 'total_score', _style(14, '#ffffff', bold=True)),
        text(410, 187, 70, 14, 'AVERAGE:', _BAND_LABEL),
        dynamic(480, 187, 50, 20, 'average_score', _style(14, _GOLD, bold=True)),
        text(545, 187, 70, 14, 'POSITION:', _BAND_LABEL),
        dynamic(615, 187, 50, 20, 'position', _style(14, _GOLD, bold=True)),
        text(680, 187, 40, 14, 'GRADE:', _BAND_LABEL),
        dynamic(720, 185, 45, 26, 'overall_grade',
                _style(16, _MAROON, bold=True, backgroundColor=_GOLD, borderRadius=4, textAlign='center', padding=4)),

        # Cognitive domain
        text(20, 225, 250, 20, 'COGNITIVE DOMAIN', _style(11, _MAROON, bold=True)),
        table(20, 248, 560, 400, table_style(_MAROON, 9, alt_row=_CREAM),
              tableType='subjects', rows=15, cols=10,
              headers=['SUBJECTS', '1ST CA', '2ND CA', '3RD CA', 'EXAM', 'TOTAL', 'GRADE', 'POS.',
                       'HIGHEST', 'REMARK'],
              columnWidths=[100, 42, 42, 42, 50, 48, 40, 35, 50, 70],
              dynamicRows=True),

        # Side panel: ratings on a 1-5 scale
        text(595, 225, 175, 18, 'AFFECTIVE DOMAIN', _style(10, _MAROON, bold=True, textAlign='center')),
        table(595, 245, 175, 180, table_style(_MAROON, 8),
              tableType='affective', rows=9, cols=6,
              headers=['TRAITS'] + _RATING_HEADERS, columnWidths=list(_RATING_WIDTHS),
              traits=['Punctuality', 'Neatness', 'Politeness', 'Honesty', 'Cooperation',
                      'Attentiveness', 'Obedience', 'Self-Control'],
              ratingScale=True),
        text(595, 435, 175, 18, 'PSYCHOMOTOR DOMAIN', _style(10, _MAROON, bold=True, textAlign='center')),
        table(595, 455, 175, 140, table_style(_MAROON, 8),
              tableType='psychomotor', rows=7, cols=6,
              headers=['SKILLS'] + _RATING_HEADERS, columnWidths=list(_RATING_WIDTHS),
              skills=['Handwriting', 'Games/Sports', 'Drawing', 'Music', 'Crafts', 'Tools Use'],
              ratingScale=True),
        shape(595, 605, 175, 110, box(_CREAM, _GOLD)),
        text(600, 610, 165, 14, 'KEY TO RATINGS', _style(9, _MAROON, bold=True, textAlign='center')),
        text(600, 626, 165, 85, '5 = Excellent\n4 = Very Good\n3 = Good\n2 = Fair\n1 = Poor',
             _style(8, _SLATE, lineHeight=1.6)),

        # Remarks
        shape(20, 660, 560, 50, box(_CREAM, _GOLD)),
        text(25, 665, 150, 12, "CLASS TEACHER'S REMARKS:", _REMARK_LABEL),
        dynamic(25, 680, 550, 25, 'teacher_comment', _style(10, _SLATE, fontStyle='italic')),
        shape(20, 720, 560, 50, box(_CREAM, _GOLD)),
        text(25, 725, 150, 12, "PRINCIPAL'S REMARKS:", _REMARK_LABEL),
        dynamic(25, 740, 550, 25, 'admin_comment', _style(10, _SLATE, fontStyle='italic')),

        # Grading scale
        shape(595, 720, 175, 100, box('#ffffff', _MAROON)),
        text(600, 725, 165, 14, 'GRADING SCALE', _style(9, _MAROON, bold=True, textAlign='center')),
        dynamic(600, 740, 165, 75, 'grading_scale', _style(7, _SLATE, lineHeight=1.3), displayType='compact'),

        # Term dates
        shape(20, 780, 754, 35, {'backgroundColor': '#f1f5f9', 'borderWidth': 1, 'borderColor': '#cbd5e1'}),
        text(25, 788, 100, 12, 'VACATION DATE:', _DATE_LABEL),
        dynamic(125, 788, 120, 12, 'vacation_date', _DATE_VALUE),
        text(280, 788, 120, 12, 'RESUMPTION DATE:', _DATE_LABEL),
        dynamic(400, 788, 120, 12, 'resumption_date', _DATE_VALUE),
        text(560, 788, 120, 12, 'NEXT TERM BEGINS:', _DATE_LABEL),
        dynamic(680, 788, 90, 12, 'next_term_date', _DATE_VALUE),

        # Signatures and stamp
        text(40, 830, 150, 12, '________________________', _style(10, _SLATE, textAlign='center')),
        text(40, 845, 150, 12, "Class Teacher's Signature", _style(8, _MUTED, textAlign='center')),
        text(320, 830, 150, 12, '________________________', _style(10, _SLATE, textAlign='center')),
        text(320, 845, 150, 12, "Principal's Signature", _style(8, _MUTED, textAlign='center')),
        shape(600, 820, 70, 70, stamp_box(_MAROON), field='school_stamp', isPlaceholder=True),
        text(600, 894, 70, 10, 'School Stamp', _style(7, _MUTED, textAlign='center')),

        # Footer
        shape(0, 1045, 794, 28, {'backgroundColor': _MAROON}),
        dynamic(20, 1052, 754, 14, 'school_website', _style(8, _CREAM, textAlign='center')),
    ],
)


# Variants with a different subjects table

first_term_template = primary_school_template.derive(
    'Periodic (First Term Only)',
    'Standard report card for a single term without cumulative calculations',
    subjects={
        'headers': ['SUBJECTS', 'CA 1', 'CA 2', 'EXAM', 'TOTAL', 'GRADE', 'REMARK'],
        'cols': 7,
        'columnWidths': [180, 60, 60, 70, 70, 50, 60],
    },
)

mid_year_template = secondary_school_template.derive(
    'Cumulative (First & Second Term)',
    'Professional template with comparison between first and second term performance',
    subjects={
        'headers': ['SUBJECTS', '1st TERM', 'CA', 'EXAM', '2nd TERM', 'TOTAL', 'AVG', 'GRADE'],
        'cols': 8,
        'columnWidths': [140, 60, 50, 60, 60, 60, 60, 50],
    },
)

annual_template = secondary_school_template.derive(
    'Full Academic Year (Annual)',
    'Comprehensive annual report with 1st, 2nd, and 3rd term cumulative performance',
    subjects={
        'headers': ['SUBJECTS', '1st TERM', '2nd TERM', '3rd TERM', 'ANNUAL AVG', 'GRADE', 'RESULT'],
        'cols': 7,
        'columnWidths': [160, 70, 70, 70, 90, 60, 70],
    },
)

DEFAULT_TEMPLATES = [
    primary_school_template,
    secondary_school_template,
    first_term_template,
    mid_year_template,
    annual_template,
]

_PRIMARY_LEVELS = ('primary', 'nursery', 'kindergarten')


def get_template_for_level(level):
    """Primary card for primary/nursery/kindergarten, secondary card otherwise"""
    if (level or '').lower() in _PRIMARY_LEVELS:
        return primary_school_template
    return secondary_school_template
