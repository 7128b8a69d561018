# renttracker/rent.py
import logging

from flask import Blueprint, abort, current_app, redirect, render_template, url_for
from flask_login import current_user, login_required

from renttracker.aggregation import grand_total, monthly_totals, tenant_totals
from renttracker.audit import audit
from renttracker.errors import ForeignKeyViolation, NotFoundOrForbidden, RentTrackerError, UnparseableMessage
from renttracker.export import make_csv_response, records_to_csv
from renttracker.forms import ParseForm, RentForm
from renttracker.mpesa_parser import parse_message
from renttracker.repository import get_ledger
from renttracker.utils import today_str

log = logging.getLogger(__name__)

rent_bp = Blueprint("rent", __name__)


def _today():
    return today_str(current_app.config.get("APP_TIMEZONE", "Africa/Nairobi"))


def _parse_id(raw):
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _render_dashboard(error=None, status=200, rent_form=None, parse_form=None):
    ledger = get_ledger()
    records = ledger.list_rent_records()
    return render_template(
        "dashboard.html",
        records=records,
        tenants=ledger.list_tenants(),
        totals=monthly_totals(records),
        rent_form=rent_form or RentForm(),
        parse_form=parse_form or ParseForm(),
        error=error,
    ), status


# -----------------------
# Dashboard
# -----------------------
@rent_bp.route("/")
@login_required
def dashboard():
    return _render_dashboard()


# -----------------------
# Manual entry
# -----------------------
@rent_bp.route("/add", methods=["POST"])
@login_required
def add_rent():
    form = RentForm()
    if not form.validate_on_submit():
        return _render_dashboard(error="Month and amount are required.", status=400, rent_form=form)

    try:
        tenant_id = _parse_id(form.tenant_id.data)
        if tenant_id is None:
            raise ForeignKeyViolation()
        record = get_ledger().add_rent_record(
            tenant_id,
            form.month.data.strip(),
            form.amount.data,
            (form.date_collected.data or "").strip() or _today(),
            (form.notes.data or "").strip() or None,
        )
    except RentTrackerError as e:
        return _render_dashboard(error=e.message, status=e.status_code, rent_form=form)

    audit(current_user, "rent_added", f"id:{record.id}, tenant_id:{record.tenant_id}")
    return redirect(url_for("rent.dashboard"))


# -----------------------
# M-PESA message entry
# -----------------------
@rent_bp.route("/parse", methods=["POST"])
@login_required
def parse_rent():
    form = ParseForm()

    try:
        if not form.validate_on_submit():
            raise UnparseableMessage()
        parsed = parse_message(form.message.data)
        record, created = get_ledger().record_parsed_payment(parsed, _today())
    except UnparseableMessage as e:
        log.info("Rejected unparseable M-PESA message from user %s", current_user.id)
        return _render_dashboard(error=e.message, status=e.status_code, parse_form=form)
    except RentTrackerError as e:
        return _render_dashboard(error=e.message, status=e.status_code, parse_form=form)

    audit(
        current_user,
        "rent_parsed",
        f"id:{record.id}, tenant_id:{record.tenant_id}, new_tenant:{created}, code:{record.mpesa_code or '-'}",
    )
    return redirect(url_for("rent.dashboard"))


# -----------------------
# Delete / edit
# -----------------------
@rent_bp.route("/delete/<int:record_id>", methods=["POST"])
@login_required
def delete_rent(record_id):
    if get_ledger().delete_rent_record(record_id):
        audit(current_user, "rent_deleted", f"id:{record_id}")
    return redirect(url_for("rent.dashboard"))


@rent_bp.route("/edit/<int:record_id>", methods=["GET", "POST"])
@login_required
def edit_rent(record_id):
    ledger = get_ledger()
    try:
        record = ledger.get_rent_record(record_id)
    except NotFoundOrForbidden:
        abort(404)

    form = RentForm(obj=record)

    if form.validate_on_submit():
        try:
            ledger.update_rent_record(
                record.id,
                form.month.data.strip(),
                form.amount.data,
                (form.date_collected.data or "").strip() or record.date_collected,
                (form.notes.data or "").strip() or None,
            )
        except RentTrackerError as e:
            return render_template("edit.html", record=record, form=form, error=e.message), e.status_code

        audit(current_user, "rent_edited", f"id:{record.id}")
        return redirect(url_for("rent.dashboard"))

    if form.is_submitted():
        return render_template("edit.html", record=record, form=form,
                               error="Month and amount are required."), 400

    return render_template("edit.html", record=record, form=form, error=None)


# -----------------------
# Summary + export
# -----------------------
@rent_bp.route("/summary")
@login_required
def summary():
    records = get_ledger().list_rent_records()
    return render_template(
        "summary.html",
        monthly=monthly_totals(records),
        by_tenant=tenant_totals(records),
        total=grand_total(records),
        count=len(records),
    )


@rent_bp.route("/export")
@login_required
def export_csv():
    records = get_ledger().list_rent_records()
    return make_csv_response(records_to_csv(records), "rent_records.csv")
