# renttracker/tenants.py
from flask import Blueprint, redirect, render_template, url_for
from flask_login import current_user, login_required

from renttracker.audit import audit
from renttracker.errors import RentTrackerError, ValidationError
from renttracker.forms import TenantForm
from renttracker.repository import get_ledger

tenants_bp = Blueprint("tenants", __name__, url_prefix="/tenants")


def _render_tenants(form=None, error=None, status=200):
    return render_template(
        "tenants.html",
        tenants=get_ledger().list_tenants(),
        form=form or TenantForm(),
        error=error,
    ), status


@tenants_bp.route("")
@login_required
def tenant_list():
    return _render_tenants()


@tenants_bp.route("/add", methods=["POST"])
@login_required
def tenant_add():
    form = TenantForm()
    try:
        if not form.validate_on_submit():
            raise ValidationError("Name and phone are required.")
        tenant = get_ledger().add_tenant(form.name.data, form.phone.data)
    except RentTrackerError as e:
        return _render_tenants(form=form, error=e.message, status=e.status_code)

    audit(current_user, "tenant_added", f"id:{tenant.id}")
    return redirect(url_for("tenants.tenant_list"))


@tenants_bp.route("/delete/<int:tenant_id>", methods=["POST"])
@login_required
def tenant_delete(tenant_id):
    # not ours or already gone: nothing to do
    if get_ledger().delete_tenant(tenant_id):
        audit(current_user, "tenant_deleted", f"id:{tenant_id}")
    return redirect(url_for("tenants.tenant_list"))
