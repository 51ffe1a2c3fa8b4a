from datetime import datetime

from extensions import db


ROLE_SUPER_ADMIN = 'super_admin'
ROLE_SCHOOL_ADMIN = 'school_admin'
ROLE_TEACHER = 'teacher'
ROLE_STUDENT = 'student'
ROLE_PARENT = 'parent'

ROLES = (ROLE_SUPER_ADMIN, ROLE_SCHOOL_ADMIN, ROLE_TEACHER, ROLE_STUDENT, ROLE_PARENT)
ADMIN_ROLES = (ROLE_SUPER_ADMIN, ROLE_SCHOOL_ADMIN)


def iso(value):
    """Serialize a date/datetime for JSON responses"""
    return value.isoformat() if value else None


# Database Models
class School(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    subdomain = db.Column(db.String(100), unique=True, nullable=True)
    address = db.Column(db.String(500), nullable=True)
    motto = db.Column(db.String(300), nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    email = db.Column(db.String(120), nullable=True)
    website = db.Column(db.String(200), nullable=True)
    logo = db.Column(db.String(500), nullable=True)  # URL or upload path
    bank_account_number = db.Column(db.String(30), nullable=True)  # Settlement account
    bank_code = db.Column(db.String(10), nullable=True)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_summary(self):
        return {'id': self.id, 'name': self.name}

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'subdomain': self.subdomain,
            'address': self.address,
            'motto': self.motto,
            'phone': self.phone,
            'email': self.email,
            'website': self.website,
            'logo': self.logo,
        }


class User(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(120), nullable=False, unique=True)
    password = db.Column(db.String(100), nullable=False)  # bcrypt hash
    role = db.Column(db.String(20), nullable=False, default=ROLE_STUDENT)
    school_id = db.Column(db.Integer, db.ForeignKey('school.id'), nullable=True)  # None for super admins
    profile_image = db.Column(db.String(500), nullable=True)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    school = db.relationship('School', backref='users')

    @staticmethod
    def email_taken(email, exclude_id=None):
        """Check if another user already has this email"""
        query = User.query.filter(db.func.lower(User.email) == email.strip().lower())
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        return query.first() is not None

    def to_dict(self):
        data = {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'schoolId': self.school_id,
            'profileImage': self.profile_image,
            'isActive': self.is_active,
            'createdAt': iso(self.created_at),
        }
        if self.school:
            data['school'] = self.school.to_summary()
        if self.admin_profile:
            data['adminProfile'] = self.admin_profile.to_dict()
        return data


class AdminProfile(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, unique=True)
    admin_type = db.Column(db.String(50), nullable=True)  # e.g. principal, bursar
    permissions = db.Column(db.JSON, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship('User', backref=db.backref('admin_profile', uselist=False, cascade='all, delete-orphan'))

    def to_dict(self):
        return {'id': self.id, 'adminType': self.admin_type, 'permissions': self.permissions or []}


class Parent(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, unique=True)
    phone = db.Column(db.String(50), nullable=True)
    alternate_phone = db.Column(db.String(50), nullable=True)
    occupation = db.Column(db.String(100), nullable=True)
    address = db.Column(db.String(500), nullable=True)
    city = db.Column(db.String(100), nullable=True)
    state = db.Column(db.String(100), nullable=True)
    country = db.Column(db.String(100), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship('User', backref=db.backref('parent_profile', uselist=False))

    PROFILE_FIELDS = ('phone', 'alternate_phone', 'occupation', 'address', 'city', 'state', 'country')

    def to_dict(self):
        # Parents are addressed by their user id in the API
        return {
            'id': self.user_id,
            'profileId': self.id,
            'schoolId': self.user.school_id,
            'name': self.user.name,
            'email': self.user.email,
            'profileImage': self.user.profile_image,
            'phone': self.phone,
            'alternatePhone': self.alternate_phone,
            'occupation': self.occupation,
            'address': self.address,
            'city': self.city,
            'state': self.state,
            'country': self.country,
        }


class Student(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, unique=True)
    admission_number = db.Column(db.String(50), nullable=True)
    admission_date = db.Column(db.Date, nullable=True)
    date_of_birth = db.Column(db.Date, nullable=True)
    gender = db.Column(db.String(20), nullable=True)
    religion = db.Column(db.String(50), nullable=True)
    blood_group = db.Column(db.String(10), nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    address = db.Column(db.String(500), nullable=True)
    city = db.Column(db.String(100), nullable=True)
    state = db.Column(db.String(100), nullable=True)
    country = db.Column(db.String(100), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship('User', backref=db.backref('student_profile', uselist=False))

    PROFILE_FIELDS = ('admission_number', 'gender', 'religion', 'blood_group', 'phone',
                      'address', 'city', 'state', 'country')

    @property
    def school_id(self):
        return self.user.school_id

    def current_enrolment(self, session_id=None):
        """Return the StudentClass row for the given (or current) session"""
        query = StudentClass.query.filter_by(student_id=self.id)
        if session_id:
            query = query.filter_by(session_id=session_id)
        else:
            query = query.join(AcademicSession).filter(AcademicSession.is_current.is_(True))
        return query.order_by(StudentClass.id.desc()).first()

    def to_summary(self):
        return {
            'id': self.id,
            'name': self.user.name,
            'email': self.user.email,
            'admissionNumber': self.admission_number,
        }

    def to_dict(self):
        enrolment = self.current_enrolment()
        return {
            'id': self.id,
            'userId': self.user_id,
            'name': self.user.name,
            'email': self.user.email,
            'profileImage': self.user.profile_image,
            'schoolId': self.user.school_id,
            'admissionNumber': self.admission_number,
            'admissionDate': iso(self.admission_date),
            'dateOfBirth': iso(self.date_of_birth),
            'gender': self.gender,
            'religion': self.religion,
            'bloodGroup': self.blood_group,
            'phone': self.phone,
            'address': self.address,
            'city': self.city,
            'state': self.state,
            'country': self.country,
            'currentClass': enrolment.to_dict() if enrolment else None,
        }


class StudentParent(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('student.id'), nullable=False)
    parent_id = db.Column(db.Integer, db.ForeignKey('parent.id'), nullable=False)
    relation = db.Column(db.String(50), default='Parent')  # Father, Mother, Guardian...
    is_primary = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    student = db.relationship('Student', backref='parent_links')
    parent = db.relationship('Parent', backref='student_links')

    __table_args__ = (db.UniqueConstraint('student_id', 'parent_id', name='unique_student_parent'),)


class AcademicSession(db.Model):
    __tablename__ = 'academic_session'

    id = db.Column(db.Integer, primary_key=True)
    school_id = db.Column(db.Integer, db.ForeignKey('school.id'), nullable=False)
    name = db.Column(db.String(100), nullable=False)  # e.g. 2024/2025
    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=False)
    is_current = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    school = db.relationship('School', backref='academic_sessions')

    def usage_counts(self):
        """Rows in other tables that reference this session"""
        return {
            'studentClasses': StudentClass.query.filter_by(session_id=self.id).count(),
            'attendance': Attendance.query.filter_by(session_id=self.id).count(),
            'results': Result.query.filter_by(session_id=self.id).count(),
        }

    def to_dict(self, with_counts=False):
        data = {
            'id': self.id,
            'schoolId': self.school_id,
            'name': self.name,
            'startDate': iso(self.start_date),
            'endDate': iso(self.end_date),
            'isCurrent': bool(self.is_current),
            'createdAt': iso(self.created_at),
            'updatedAt': iso(self.updated_at),
            'school': self.school.to_summary() if self.school else None,
        }
        if with_counts:
            data['_count'] = self.usage_counts()
        return data


class SchoolClass(db.Model):
    __tablename__ = 'school_class'

    id = db.Column(db.Integer, primary_key=True)
    school_id = db.Column(db.Integer, db.ForeignKey('school.id'), nullable=False)
    name = db.Column(db.String(100), nullable=False)  # e.g. JSS 1
    section = db.Column(db.String(20), nullable=True)  # e.g. A
    level = db.Column(db.String(50), nullable=True)  # primary, junior_secondary, ...
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    school = db.relationship('School', backref='classes')

    def to_dict(self):
        return {
            'id': self.id,
            'schoolId': self.school_id,
            'name': self.name,
            'section': self.section,
            'level': self.level,
        }


class StudentClass(db.Model):
    __tablename__ = 'student_class'

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('student.id'), nullable=False)
    class_id = db.Column(db.Integer, db.ForeignKey('school_class.id'), nullable=False)
    session_id = db.Column(db.Integer, db.ForeignKey('academic_session.id'), nullable=False)
    roll_number = db.Column(db.String(20), nullable=True)
    status = db.Column(db.String(20), default='ACTIVE')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    student = db.relationship('Student', backref='enrolments')
    school_class = db.relationship('SchoolClass', backref='enrolments')
    session = db.relationship('AcademicSession', backref='student_classes')

    __table_args__ = (db.UniqueConstraint('student_id', 'session_id', name='unique_student_session'),)

    def to_dict(self):
        return {
            'id': self.id,
            'classId': self.class_id,
            'sessionId': self.session_id,
            'rollNumber': self.roll_number,
            'status': self.status,
            'class': self.school_class.to_dict() if self.school_class else None,
        }


class Attendance(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('student.id'), nullable=False)
    class_id = db.Column(db.Integer, db.ForeignKey('school_class.id'), nullable=True)
    session_id = db.Column(db.Integer, db.ForeignKey('academic_session.id'), nullable=False)
    date = db.Column(db.Date, nullable=False)
    status = db.Column(db.String(20), default='PRESENT')  # PRESENT, ABSENT, LATE
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class Result(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey('student.id'), nullable=False)
    subject_id = db.Column(db.Integer, db.ForeignKey('subject.id'), nullable=False)
    session_id = db.Column(db.Integer, db.ForeignKey('academic_session.id'), nullable=False)
    period_id = db.Column(db.Integer, db.ForeignKey('result_period.id'), nullable=True)
    scores = db.Column(db.JSON, nullable=True)  # component key -> score
    total = db.Column(db.Float, default=0.0)
    grade = db.Column(db.String(5), nullable=True)
    remark = db.Column(db.String(100), nullable=True)
    teacher_comment = db.Column(db.Text, nullable=True)
    admin_comment = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    subject = db.relationship('Subject')


class ResultConfiguration(db.Model):
    __tablename__ = 'result_configuration'

    id = db.Column(db.Integer, primary_key=True)
    school_id = db.Column(db.Integer, db.ForeignKey('school.id'), nullable=False)
    session_id = db.Column(db.Integer, db.ForeignKey('academic_session.id'), nullable=False)
    academic_year = db.Column(db.String(20), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    session = db.relationship('AcademicSession', backref='result_configurations')
    periods = db.relationship('ResultPeriod', backref='configuration', order_by='ResultPeriod.id')
    assessment_components = db.relationship('AssessmentComponent', backref='configuration')
    grade_scales = db.relationship('GradeScale', backref='configuration', order_by='desc(GradeScale.min_score)')

    def to_dict(self):
        return {
            'id': self.id,
            'sessionId': self.session_id,
            'academicYear': self.academic_year,
            'periods': [p.to_dict() for p in self.periods],
        }


class ResultPeriod(db.Model):
    __tablename__ = 'result_period'

    id = db.Column(db.Integer, primary_key=True)
    configuration_id = db.Column(db.Integer, db.ForeignKey('result_configuration.id'), nullable=False)
    name = db.Column(db.String(100), nullable=False)  # e.g. First Term
    weight = db.Column(db.Float, default=100.0)

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'weight': self.weight}


class AssessmentComponent(db.Model):
    __tablename__ = 'assessment_component'

    id = db.Column(db.Integer, primary_key=True)
    configuration_id = db.Column(db.Integer, db.ForeignKey('result_configuration.id'), nullable=False)
    name = db.Column(db.String(100), nullable=False)  # e.g. 1st CA
    key = db.Column(db.String(50), nullable=False)
    max_score = db.Column(db.Float, default=0.0)


class GradeScale(db.Model):
    __tablename__ = 'grade_scale'

    id = db.Column(db.Integer, primary_key=True)
    configuration_id = db.Column(db.Integer, db.ForeignKey('result_configuration.id'), nullable=False)
    min_score = db.Column(db.Float, nullable=False)
    max_score = db.Column(db.Float, nullable=False)
    grade = db.Column(db.String(5), nullable=False)
    remark = db.Column(db.String(100), nullable=True)


class ClassSubject(db.Model):
    __tablename__ = 'class_subject'

    id = db.Column(db.Integer, primary_key=True)
    class_id = db.Column(db.Integer, db.ForeignKey('school_class.id'), nullable=False)
    subject_id = db.Column(db.Integer, db.ForeignKey('subject.id'), nullable=False)

    school_class = db.relationship('SchoolClass')

    __table_args__ = (db.UniqueConstraint('class_id', 'subject_id', name='unique_class_subject'),)


class Subject(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    school_id = db.Column(db.Integer, db.ForeignKey('school.id'), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    code = db.Column(db.String(20), nullable=True)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    class_links = db.relationship('ClassSubject', backref='subject', cascade='all, delete-orphan')
    teacher_links = db.relationship('SubjectTeacher', backref='subject', cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'schoolId': self.school_id,
            'name': self.name,
            'code': self.code,
            'description': self.description,
            'classes': [link.school_class.to_dict() for link in self.class_links],
            'teachers': [link.to_dict() for link in self.teacher_links],
            '_count': {
                'classes': len(self.class_links),
                'teachers': len(self.teacher_links),
                'results': Result.query.filter_by(subject_id=self.id).count(),
            },
        }


class SubjectTeacher(db.Model):
    __tablename__ = 'subject_teacher'

    id = db.Column(db.Integer, primary_key=True)
    subject_id = db.Column(db.Integer, db.ForeignKey('subject.id'), nullable=False)
    teacher_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    teacher = db.relationship('User')

    __table_args__ = (db.UniqueConstraint('subject_id', 'teacher_id', name='unique_subject_teacher'),)

    def to_dict(self):
        return {
            'id': self.id,
            'subjectId': self.subject_id,
            'teacherId': self.teacher_id,
            'subject': {'id': self.subject.id, 'name': self.subject.name, 'code': self.subject.code},
            'teacher': {'id': self.teacher.id, 'name': self.teacher.name, 'email': self.teacher.email},
        }


class PaymentAccount(db.Model):
    __tablename__ = 'payment_account'

    id = db.Column(db.Integer, primary_key=True)
    school_id = db.Column(db.Integer, db.ForeignKey('school.id'), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    account_no = db.Column(db.String(30), nullable=False)
    bank_name = db.Column(db.String(100), nullable=False)
    branch_code = db.Column(db.String(20), nullable=True)
    description = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'schoolId': self.school_id,
            'name': self.name,
            'accountNo': self.account_no,
            'bankName': self.bank_name,
            'branchCode': self.branch_code,
            'description': self.description,
            'isActive': self.is_active,
        }


class Bill(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    school_id = db.Column(db.Integer, db.ForeignKey('school.id'), nullable=False)
    account_id = db.Column(db.Integer, db.ForeignKey('payment_account.id'), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    amount = db.Column(db.Float, nullable=False)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    account = db.relationship('PaymentAccount')
    assignments = db.relationship('BillAssignment', backref='bill', cascade='all, delete-orphan',
                                  order_by='BillAssignment.id')

    def to_dict(self, assignments=None, with_payments=False):
        assignments = self.assignments if assignments is None else assignments
        return {
            'id': self.id,
            'schoolId': self.school_id,
            'name': self.name,
            'amount': self.amount,
            'description': self.description,
            'createdAt': iso(self.created_at),
            'account': self.account.to_dict() if self.account else None,
            'assignments': [a.to_dict(with_payments=with_payments) for a in assignments],
        }


class BillAssignment(db.Model):
    __tablename__ = 'bill_assignment'

    id = db.Column(db.Integer, primary_key=True)
    bill_id = db.Column(db.Integer, db.ForeignKey('bill.id'), nullable=False)
    target_type = db.Column(db.String(10), nullable=False)  # CLASS or STUDENT
    target_id = db.Column(db.Integer, nullable=False)
    due_date = db.Column(db.DateTime, nullable=False)
    status = db.Column(db.String(20), default='PENDING')  # PENDING, PARTIAL, PAID, OVERDUE
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    student_payments = db.relationship('StudentPayment', backref='assignment', cascade='all, delete-orphan')

    def amount_paid(self):
        return sum(p.amount_paid for p in self.student_payments if p.status == 'SUCCESS')

    def to_dict(self, with_payments=False):
        paid = self.amount_paid()
        data = {
            'id': self.id,
            'billId': self.bill_id,
            'targetType': self.target_type,
            'targetId': self.target_id,
            'dueDate': iso(self.due_date),
            'status': self.status,
            'amountPaid': paid,
            'outstanding': max(0, self.bill.amount - paid) if self.bill else None,
        }
        if self.target_type == 'CLASS':
            target = db.session.get(SchoolClass, self.target_id)
            data['class'] = target.to_dict() if target else None
        else:
            target = db.session.get(Student, self.target_id)
            data['student'] = target.to_summary() if target else None
        if with_payments:
            data['studentPayments'] = [p.to_dict() for p in self.student_payments]
        return data


class StudentPayment(db.Model):
    __tablename__ = 'student_payment'

    id = db.Column(db.Integer, primary_key=True)
    school_id = db.Column(db.Integer, db.ForeignKey('school.id'), nullable=False)
    assignment_id = db.Column(db.Integer, db.ForeignKey('bill_assignment.id'), nullable=False)
    student_id = db.Column(db.Integer, db.ForeignKey('student.id'), nullable=False)
    amount_paid = db.Column(db.Float, nullable=False)
    status = db.Column(db.String(20), default='PENDING')  # PENDING, SUCCESS, FAILED
    reference = db.Column(db.String(100), nullable=True)
    paid_at = db.Column(db.DateTime, default=datetime.utcnow)

    student = db.relationship('Student')

    def to_dict(self):
        return {
            'id': self.id,
            'studentId': self.student_id,
            'amountPaid': self.amount_paid,
            'status': self.status,
            'reference': self.reference,
            'paidAt': iso(self.paid_at),
            'student': self.student.to_summary() if self.student else None,
        }


class SchoolWallet(db.Model):
    __tablename__ = 'school_wallet'

    id = db.Column(db.Integer, primary_key=True)
    school_id = db.Column(db.Integer, db.ForeignKey('school.id'), nullable=False, unique=True)
    balance = db.Column(db.Float, nullable=False, default=0.0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class WithdrawalRequest(db.Model):
    __tablename__ = 'withdrawal_request'

    id = db.Column(db.Integer, primary_key=True)
    school_id = db.Column(db.Integer, db.ForeignKey('school.id'), nullable=False)
    requested_by_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    amount = db.Column(db.Float, nullable=False)
    bank_name = db.Column(db.String(100), nullable=False, default='Unknown Bank')
    bank_code = db.Column(db.String(10), nullable=False)
    account_number = db.Column(db.String(30), nullable=False)
    account_name = db.Column(db.String(200), nullable=False)
    reference = db.Column(db.String(50), nullable=False, unique=True)
    status = db.Column(db.String(20), default='PENDING')  # PENDING, COMPLETED, FAILED
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'amount': self.amount,
            'bankName': self.bank_name,
            'bankCode': self.bank_code,
            'accountNumber': self.account_number,
            'accountName': self.account_name,
            'reference': self.reference,
            'status': self.status,
            'createdAt': iso(self.created_at),
        }


class UserActivityLog(db.Model):
    __tablename__ = 'user_activity_log'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    page = db.Column(db.String(100), nullable=True)
    action = db.Column(db.String(200), nullable=False)
    details = db.Column('metadata', db.JSON, nullable=True)  # 'metadata' is reserved on declarative models
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class ResultTemplate(db.Model):
    __tablename__ = 'result_template'

    id = db.Column(db.Integer, primary_key=True)
    school_id = db.Column(db.Integer, db.ForeignKey('school.id'), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    content = db.Column(db.JSON, nullable=False)  # editor state: elements + canvas size
    is_default = db.Column(db.Boolean, default=False)
    created_by_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'schoolId': self.school_id,
            'name': self.name,
            'description': self.description,
            'content': self.content,
            'isDefault': bool(self.is_default),
            'createdAt': iso(self.created_at),
            'updatedAt': iso(self.updated_at),
        }
