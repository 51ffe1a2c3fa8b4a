"""
Request body validation.

Forms are filled from the JSON body (or multipart form data for uploads) and
use the wire names of the API as field names.
"""
from flask import request
from flask_wtf import FlaskForm
from flask_wtf.file import FileAllowed, FileField
from werkzeug.datastructures import MultiDict
from wtforms import BooleanField, DateTimeField, FloatField, IntegerField, PasswordField, StringField
from wtforms.validators import AnyOf, DataRequired, Length, Optional, Regexp, ValidationError

from app_models import ROLES

DATE_FORMATS = [
    '%Y-%m-%d',
    '%Y-%m-%dT%H:%M',
    '%Y-%m-%dT%H:%M:%S',
    '%Y-%m-%dT%H:%M:%SZ',
    '%Y-%m-%dT%H:%M:%S.%fZ',
    '%Y-%m-%dT%H:%M:%S.%f',
]

EMAIL = Regexp(r'^[^@\s]+@[^@\s]+\.[^@\s]+$', message='Invalid email address')
IMAGE_TYPES = FileAllowed(['jpg', 'jpeg', 'png', 'gif', 'webp'], 'Images only')


def positive(form, field):
    if field.data is not None and field.data <= 0:
        raise ValidationError('Must be greater than zero')


def load_form(form_class, payload=None):
    """Build a form from `payload` or the current request body.

    Lists and objects are left out; handlers read those from the JSON body.
    """
    if payload is None:
        if request.files or request.form:
            return form_class()
        payload = request.get_json(silent=True) or {}
    items = []
    for key, value in payload.items():
        if value is None or isinstance(value, (list, dict)):
            continue
        if not isinstance(value, (bool, str)):
            value = str(value)
        items.append((key, value))
    return form_class(formdata=MultiDict(items))


class ApiForm(FlaskForm):
    class Meta:
        csrf = False


class LoginForm(ApiForm):
    email = StringField('Email', validators=[DataRequired(), EMAIL])
    password = PasswordField('Password', validators=[DataRequired()])


# Academic sessions

class SessionForm(ApiForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=100)])
    startDate = DateTimeField('Start date', format=DATE_FORMATS, validators=[DataRequired()])
    endDate = DateTimeField('End date', format=DATE_FORMATS, validators=[DataRequired()])
    isCurrent = BooleanField('Current')
    schoolId = IntegerField('School', validators=[Optional()])

    def validate_endDate(self, field):
        if self.startDate.data and field.data and field.data < self.startDate.data:
            raise ValidationError('End date cannot be before start date')


class SessionUpdateForm(ApiForm):
    name = StringField('Name', validators=[Optional(), Length(min=1, max=100)])
    startDate = DateTimeField('Start date', format=DATE_FORMATS, validators=[Optional()])
    endDate = DateTimeField('End date', format=DATE_FORMATS, validators=[Optional()])
    isCurrent = BooleanField('Current')


# Billing

class PaymentAccountForm(ApiForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=200)])
    accountNo = StringField('Account number', validators=[DataRequired(), Length(max=30)])
    bankName = StringField('Bank name', validators=[DataRequired(), Length(max=100)])
    branchCode = StringField('Branch code', validators=[Optional(), Length(max=20)])
    description = StringField('Description', validators=[Optional()])


class BillForm(ApiForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=200)])
    amount = FloatField('Amount', validators=[DataRequired(), positive])
    accountId = IntegerField('Payment account', validators=[DataRequired()])
    description = StringField('Description', validators=[Optional()])


class AssignmentForm(ApiForm):
    targetType = StringField('Target type', validators=[
        DataRequired(), AnyOf(['CLASS', 'STUDENT'], message='Target type must be CLASS or STUDENT')])
    targetId = IntegerField('Target', validators=[DataRequired()])
    dueDate = DateTimeField('Due date', format=DATE_FORMATS, validators=[DataRequired()])


class WithdrawalForm(ApiForm):
    amount = FloatField('Amount', validators=[DataRequired(), positive])
    bankCode = StringField('Bank code', validators=[DataRequired(), Length(max=10)])
    bankName = StringField('Bank name', validators=[Optional(), Length(max=100)])
    accountNumber = StringField('Account number', validators=[DataRequired(), Length(max=30)])
    accountName = StringField('Account name', validators=[DataRequired(), Length(max=200)])


# People

class ParentProfileMixin:
    phone = StringField('Phone', validators=[Optional(), Length(max=50)])
    alternatePhone = StringField('Alternate phone', validators=[Optional(), Length(max=50)])
    occupation = StringField('Occupation', validators=[Optional(), Length(max=100)])
    address = StringField('Address', validators=[Optional(), Length(max=500)])
    city = StringField('City', validators=[Optional(), Length(max=100)])
    state = StringField('State', validators=[Optional(), Length(max=100)])
    country = StringField('Country', validators=[Optional(), Length(max=100)])


class ParentForm(ParentProfileMixin, ApiForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=200)])
    email = StringField('Email', validators=[DataRequired(), EMAIL])
    password = PasswordField('Password', validators=[DataRequired(), Length(min=6)])
    profileImage = FileField('Profile image', validators=[IMAGE_TYPES])


class ParentUpdateForm(ParentProfileMixin, ApiForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=200)])
    email = StringField('Email', validators=[DataRequired(), EMAIL])
    password = PasswordField('Password', validators=[Optional(), Length(min=6)])


class StudentForm(ApiForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=200)])
    email = StringField('Email', validators=[DataRequired(), EMAIL])
    password = PasswordField('Password', validators=[Optional(), Length(min=6)])
    admissionNumber = StringField('Admission number', validators=[Optional(), Length(max=50)])
    admissionDate = DateTimeField('Admission date', format=DATE_FORMATS, validators=[Optional()])
    dateOfBirth = DateTimeField('Date of birth', format=DATE_FORMATS, validators=[Optional()])
    gender = StringField('Gender', validators=[Optional(), Length(max=20)])
    religion = StringField('Religion', validators=[Optional(), Length(max=50)])
    bloodGroup = StringField('Blood group', validators=[Optional(), Length(max=10)])
    phone = StringField('Phone', validators=[Optional(), Length(max=50)])
    address = StringField('Address', validators=[Optional(), Length(max=500)])
    city = StringField('City', validators=[Optional(), Length(max=100)])
    state = StringField('State', validators=[Optional(), Length(max=100)])
    country = StringField('Country', validators=[Optional(), Length(max=100)])
    classId = IntegerField('Class', validators=[Optional()])
    sessionId = IntegerField('Session', validators=[Optional()])
    rollNumber = StringField('Roll number', validators=[Optional(), Length(max=20)])


class StudentUpdateForm(StudentForm):
    name = StringField('Name', validators=[Optional(), Length(max=200)])
    email = StringField('Email', validators=[Optional(), EMAIL])


class UserForm(ApiForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=200)])
    email = StringField('Email', validators=[DataRequired(), EMAIL])
    password = PasswordField('Password', validators=[DataRequired(), Length(min=6)])
    role = StringField('Role', validators=[DataRequired(), AnyOf(ROLES, message='Invalid role')])
    schoolId = IntegerField('School', validators=[Optional()])
    adminType = StringField('Admin type', validators=[Optional(), Length(max=50)])
    phone = StringField('Phone', validators=[Optional(), Length(max=50)])


class UserUpdateForm(ApiForm):
    name = StringField('Name', validators=[Optional(), Length(max=200)])
    email = StringField('Email', validators=[Optional(), EMAIL])
    password = PasswordField('Password', validators=[Optional(), Length(min=6)])
    role = StringField('Role', validators=[Optional(), AnyOf(ROLES, message='Invalid role')])
    schoolId = IntegerField('School', validators=[Optional()])
    isActive = BooleanField('Active')


# Academics

class ClassForm(ApiForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=100)])
    section = StringField('Section', validators=[Optional(), Length(max=20)])
    level = StringField('Level', validators=[Optional(), Length(max=50)])


class SubjectForm(ApiForm):
    name = StringField('Name', validators=[
        DataRequired(), Length(min=2, max=100, message='Subject name must be at least 2 characters')])
    code = StringField('Code', validators=[Optional(), Length(max=20)])
    description = StringField('Description', validators=[Optional()])
    level = StringField('Level', validators=[Optional(), Length(max=50)])


class SubjectUpdateForm(SubjectForm):
    name = StringField('Name', validators=[
        Optional(), Length(min=2, max=100, message='Subject name must be at least 2 characters')])


class SubjectTeacherForm(ApiForm):
    subjectId = IntegerField('Subject', validators=[DataRequired()])
    teacherId = IntegerField('Teacher', validators=[DataRequired()])


class ResultTemplateForm(ApiForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=200)])
    description = StringField('Description', validators=[Optional()])
    isDefault = BooleanField('Default')
