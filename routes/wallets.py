import uuid

from flask import Blueprint, current_app, jsonify
from sqlalchemy import func, update

from app_models import (ADMIN_ROLES, School, SchoolWallet, StudentPayment, UserActivityLog, WithdrawalRequest)
from errors import api_error, server_error, validation_error
from extensions import db
from forms import WithdrawalForm, load_form
from security import api_login_required, get_session, roles_required

wallets_bp = Blueprint('wallets', __name__, url_prefix='/api')

# Withdrawals are paid out manually to one of these
SUPPORTED_BANKS = [
    {'code': '044', 'name': 'Access Bank'},
    {'code': '058', 'name': 'Guaranty Trust Bank'},
    {'code': '057', 'name': 'Zenith Bank'},
    {'code': '011', 'name': 'First Bank of Nigeria'},
    {'code': '033', 'name': 'United Bank for Africa'},
    {'code': '232', 'name': 'Sterling Bank'},
    {'code': '035', 'name': 'Wema Bank'},
    {'code': '070', 'name': 'Fidelity Bank'},
    {'code': '010', 'name': '9PSB'},
    {'code': '999991', 'name': 'Palmpay'},
    {'code': '999992', 'name': 'OPay'},
    {'code': '050', 'name': 'Ecobank Nigeria'},
    {'code': '030', 'name': 'Heritage Bank'},
    {'code': '082', 'name': 'Keystone Bank'},
    {'code': '221', 'name': 'Stanbic IBTC Bank'},
    {'code': '032', 'name': 'Union Bank of Nigeria'},
    {'code': '215', 'name': 'Unity Bank'},
]
_BANK_NAMES = {bank['code']: bank['name'] for bank in SUPPORTED_BANKS}

# Statuses that count against the wallet
_WITHDRAWN_STATUSES = ('PENDING', 'COMPLETED')


def debit_wallet(school_id, amount) -> bool:
    """Decrement the balance only if it covers `amount`; False when it does not.

    A single conditional UPDATE so concurrent withdrawals cannot overdraw.
    """
    result = db.session.execute(
        update(SchoolWallet)
        .where(SchoolWallet.school_id == school_id, SchoolWallet.balance >= amount)
        .values(balance=SchoolWallet.balance - amount)
    )
    return result.rowcount == 1


@wallets_bp.route('/school/wallet', methods=['GET'])
@api_login_required
def school_wallet():
    school_id = get_session().get('schoolId')
    if not school_id:
        return api_error('Unauthorized', 401)
    try:
        wallet = SchoolWallet.query.filter_by(school_id=school_id).first()
        fees = (db.session.query(func.coalesce(func.sum(StudentPayment.amount_paid), 0))
                .filter(StudentPayment.school_id == school_id, StudentPayment.status == 'SUCCESS').scalar())
        withdrawn = (db.session.query(func.coalesce(func.sum(WithdrawalRequest.amount), 0))
                     .filter(WithdrawalRequest.school_id == school_id,
                             WithdrawalRequest.status.in_(_WITHDRAWN_STATUSES)).scalar())
        school = db.session.get(School, school_id)
        return jsonify({
            'balance': wallet.balance if wallet else 0,
            'totalFeesCollected': float(fees or 0),
            'totalWithdrawn': float(withdrawn or 0),
            'bankAccountNumber': school.bank_account_number if school else None,
            'bankCode': school.bank_code if school else None,
            'schoolName': school.name if school else None,
        })
    except Exception as e:
        return server_error('Failed to fetch wallet', e)


@wallets_bp.route('/wallets/withdraw', methods=['GET'])
@api_login_required
def list_banks():
    return jsonify(SUPPORTED_BANKS)


@wallets_bp.route('/wallets/withdraw', methods=['POST'])
@roles_required(*ADMIN_ROLES)
def request_withdrawal():
    session = get_session()
    school_id = session.get('schoolId')
    if not school_id:
        return api_error('School ID is required', 400)

    form = load_form(WithdrawalForm)
    if not form.validate():
        return validation_error(form)
    amount = form.amount.data

    try:
        if not debit_wallet(school_id, amount):
            db.session.rollback()
            return api_error('Insufficient wallet balance', 400)

        reference = f"WD-{school_id}-{uuid.uuid4().hex[:8]}"
        bank_name = form.bankName.data or _BANK_NAMES.get(form.bankCode.data, 'Unknown Bank')
        db.session.add(WithdrawalRequest(
            school_id=school_id,
            requested_by_id=session['id'],
            amount=amount,
            bank_name=bank_name,
            bank_code=form.bankCode.data,
            account_number=form.accountNumber.data,
            account_name=form.accountName.data,
            reference=reference,
            status='PENDING',
        ))
        db.session.add(UserActivityLog(
            user_id=session['id'],
            page='Wallet',
            action='Withdrawal Requested',
            details={'amount': amount, 'reference': reference, 'bank': bank_name,
                     'account': form.accountNumber.data},
        ))
        db.session.commit()
        current_app.logger.info(f"Withdrawal {reference} of {amount} requested for school {school_id}")
        return jsonify({
            'message': 'Withdrawal request submitted for processing',
            'reference': reference,
            'status': 'PENDING',
        })
    except Exception as e:
        return server_error('Failed to process withdrawal', e)


@wallets_bp.route('/wallets/withdrawals', methods=['GET'])
@roles_required(*ADMIN_ROLES)
def list_withdrawals():
    school_id = get_session().get('schoolId')
    if not school_id:
        return api_error('School ID is required', 400)
    withdrawals = (WithdrawalRequest.query.filter_by(school_id=school_id)
                   .order_by(WithdrawalRequest.created_at.desc()).all())
    return jsonify([w.to_dict() for w in withdrawals])
