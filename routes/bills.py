from functools import wraps

from flask import Blueprint, current_app, jsonify, request

from app_models import ADMIN_ROLES, Bill, BillAssignment, PaymentAccount, SchoolClass, Student, User
from errors import api_error, server_error, validation_error
from extensions import db
from forms import AssignmentForm, BillForm, PaymentAccountForm, load_form
from security import get_session

bills_bp = Blueprint('bills', __name__, url_prefix='/api')


def school_admin_required(f):
    """Admins attached to a school; bills are always school-scoped"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        session = get_session()
        if not session:
            return api_error('Unauthorized', 401)
        if session.get('role') not in ADMIN_ROLES or not session.get('schoolId'):
            return api_error('Only school admins can access bills', 403)
        return f(*args, **kwargs)
    return decorated_function


def _target_exists(target_type, target_id, school_id) -> bool:
    if target_type == 'CLASS':
        return SchoolClass.query.filter_by(id=target_id, school_id=school_id).first() is not None
    return (Student.query.join(User).filter(Student.id == target_id, User.school_id == school_id)
            .first() is not None)


def _matches_filters(assignment, status, class_id, student_id) -> bool:
    if status and assignment.status != status:
        return False
    if class_id and not (assignment.target_type == 'CLASS' and assignment.target_id == class_id):
        return False
    if student_id:
        direct = assignment.target_type == 'STUDENT' and assignment.target_id == student_id
        paid = any(p.student_id == student_id for p in assignment.student_payments)
        if not (direct or paid):
            return False
    return True


# Payment accounts

@bills_bp.route('/payment-accounts', methods=['GET'])
@school_admin_required
def list_payment_accounts():
    accounts = (PaymentAccount.query.filter_by(school_id=get_session()['schoolId'])
                .order_by(PaymentAccount.created_at.desc()).all())
    return jsonify([a.to_dict() for a in accounts])


@bills_bp.route('/payment-accounts', methods=['POST'])
@school_admin_required
def create_payment_account():
    form = load_form(PaymentAccountForm)
    if not form.validate():
        return validation_error(form)
    try:
        account = PaymentAccount(
            school_id=get_session()['schoolId'],
            name=form.name.data,
            account_no=form.accountNo.data,
            bank_name=form.bankName.data,
            branch_code=form.branchCode.data or None,
            description=form.description.data or None,
        )
        db.session.add(account)
        db.session.commit()
        return jsonify(account.to_dict()), 201
    except Exception as e:
        return server_error('Failed to create payment account', e)


# Bills

@bills_bp.route('/bills', methods=['GET'])
@school_admin_required
def list_bills():
    status = request.args.get('status')
    class_id = request.args.get('classId', type=int)
    student_id = request.args.get('studentId', type=int)
    try:
        bills = Bill.query.filter_by(school_id=get_session()['schoolId']).order_by(Bill.created_at.desc()).all()
        data = []
        for bill in bills:
            assignments = [a for a in bill.assignments if _matches_filters(a, status, class_id, student_id)]
            data.append(bill.to_dict(assignments=assignments, with_payments=True))
        return jsonify(data)
    except Exception as e:
        return server_error('Failed to fetch bills', e)


@bills_bp.route('/bills', methods=['POST'])
@school_admin_required
def create_bill():
    school_id = get_session()['schoolId']
    payload = request.get_json(silent=True) or {}
    form = load_form(BillForm, payload)
    if not form.validate():
        return validation_error(form)

    raw_assignments = payload.get('assignments')
    if not isinstance(raw_assignments, list) or not raw_assignments:
        return api_error('At least one assignment is required', 400)

    account = PaymentAccount.query.filter_by(id=form.accountId.data, school_id=school_id).first()
    if not account:
        return api_error('Invalid payment account', 400)

    assignment_forms = []
    for index, raw in enumerate(raw_assignments):
        if not isinstance(raw, dict):
            return api_error('Validation error', 400, details={'assignments': {index: ['Must be an object']}})
        assignment_form = load_form(AssignmentForm, raw)
        if not assignment_form.validate():
            return api_error('Validation error', 400, details={'assignments': {index: assignment_form.errors}})
        if not _target_exists(assignment_form.targetType.data, assignment_form.targetId.data, school_id):
            return api_error(f"{assignment_form.targetType.data.title()} not found", 404)
        assignment_forms.append(assignment_form)

    try:
        bill = Bill(
            school_id=school_id,
            account_id=account.id,
            name=form.name.data,
            amount=form.amount.data,
            description=form.description.data or None,
        )
        for assignment_form in assignment_forms:
            bill.assignments.append(BillAssignment(
                target_type=assignment_form.targetType.data,
                target_id=assignment_form.targetId.data,
                due_date=assignment_form.dueDate.data,
            ))
        db.session.add(bill)
        db.session.commit()
        current_app.logger.info(f"Bill '{bill.name}' created with {len(assignment_forms)} assignment(s)")
        return jsonify(bill.to_dict()), 201
    except Exception as e:
        return server_error('Failed to create bill', e)


@bills_bp.route('/bills/<int:bill_id>', methods=['GET'])
@school_admin_required
def get_bill(bill_id):
    bill = Bill.query.filter_by(id=bill_id, school_id=get_session()['schoolId']).first()
    if not bill:
        return api_error('Bill not found', 404)
    return jsonify(bill.to_dict(with_payments=True))


@bills_bp.route('/bills/<int:bill_id>/assignments', methods=['POST'])
@school_admin_required
def create_bill_assignment(bill_id):
    school_id = get_session()['schoolId']
    bill = Bill.query.filter_by(id=bill_id, school_id=school_id).first()
    if not bill:
        return api_error('Bill not found', 404)

    form = load_form(AssignmentForm)
    if not form.validate():
        return validation_error(form)
    if not _target_exists(form.targetType.data, form.targetId.data, school_id):
        return api_error(f"{form.targetType.data.title()} not found", 404)

    try:
        assignment = BillAssignment(
            bill_id=bill.id,
            target_type=form.targetType.data,
            target_id=form.targetId.data,
            due_date=form.dueDate.data,
        )
        db.session.add(assignment)
        db.session.commit()
        return jsonify(assignment.to_dict()), 201
    except Exception as e:
        return server_error('Failed to create bill assignment', e)


@bills_bp.route('/bills/<int:bill_id>/assignments/<int:assignment_id>', methods=['GET'])
@school_admin_required
def get_bill_assignment(bill_id, assignment_id):
    assignment = BillAssignment.query.filter_by(id=assignment_id, bill_id=bill_id).first()
    if not assignment:
        return api_error('Bill assignment not found', 404)
    if assignment.bill.school_id != get_session()['schoolId']:
        return api_error('You do not have access to this bill assignment', 403)

    data = assignment.to_dict(with_payments=True)
    data['bill'] = {
        'id': assignment.bill.id,
        'name': assignment.bill.name,
        'amount': assignment.bill.amount,
        'account': assignment.bill.account.to_dict(),
    }
    return jsonify(data)
