# repository.py
"""Owner-scoped data access for tenants and rent records.

A :class:`LedgerRepository` is bound to one user id when it is built and
every query it issues filters on that id, so handlers cannot read or touch
another landlord's rows. Operations on rows the user does not own are
silent no-ops, except where the caller needs an answer (``get_rent_record``
and ``add_rent_record`` raise :class:`NotFoundOrForbidden` subclasses).
"""

import logging
from decimal import Decimal, InvalidOperation

from flask_login import current_user
from sqlalchemy.exc import IntegrityError

from renttracker.errors import ForeignKeyViolation, NotFoundOrForbidden, ValidationError
from renttracker.extensions import db
from renttracker.models import RentRecord, Tenant
from renttracker.utils import normalize_phone

log = logging.getLogger(__name__)


MAX_AMOUNT = Decimal(10) ** 10  # Numeric(12, 2)


def to_amount(value) -> Decimal:
    """Coerce form/parser input to a 2dp Decimal, rejecting junk and <= 0."""
    try:
        amount = Decimal(str(value).replace(",", "").strip())
    except (InvalidOperation, AttributeError):
        raise ValidationError("Amount must be a number.")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("Amount must be greater than zero.")
    if amount >= MAX_AMOUNT:
        raise ValidationError("Amount is too large.")
    return amount.quantize(Decimal("0.01"))


class LedgerRepository:
    def __init__(self, user_id):
        if user_id is None:
            raise ValueError("LedgerRepository needs an authenticated user id")
        self.user_id = user_id

    # -----------------------
    # Tenants
    # -----------------------
    def _tenants(self):
        return Tenant.query.filter(Tenant.owner_id == self.user_id)

    def list_tenants(self):
        return self._tenants().order_by(Tenant.name.asc(), Tenant.id.asc()).all()

    def get_tenant(self, tenant_id):
        return self._tenants().filter(Tenant.id == tenant_id).first()

    def find_tenant_by_phone(self, phone):
        phone = normalize_phone(phone)
        if not phone:
            return None
        return self._tenants().filter(Tenant.phone == phone).first()

    def add_tenant(self, name, phone) -> Tenant:
        name = (name or "").strip()
        phone = normalize_phone(phone)
        if not name or not phone:
            raise ValidationError("Name and phone are required.")

        if self.find_tenant_by_phone(phone):
            raise ValidationError("A tenant with that phone already exists.")

        tenant = Tenant(owner_id=self.user_id, name=name, phone=phone)
        try:
            db.session.add(tenant)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ValidationError("A tenant with that phone already exists.")
        return tenant

    def delete_tenant(self, tenant_id) -> bool:
        tenant = self.get_tenant(tenant_id)
        if tenant is None:
            return False
        db.session.delete(tenant)
        db.session.commit()
        return True

    # -----------------------
    # Rent records
    # -----------------------
    def _records(self):
        return RentRecord.query.filter(RentRecord.owner_id == self.user_id)

    def list_rent_records(self):
        """Records joined with their tenant, newest ``date_collected`` first.

        Ordering is on the stored text, so only ``YYYY-MM-DD`` values sort
        chronologically.
        """
        return (
            self._records()
            .join(Tenant, RentRecord.tenant_id == Tenant.id)
            .filter(Tenant.owner_id == self.user_id)
            .order_by(RentRecord.date_collected.desc(), RentRecord.id.desc())
            .all()
        )

    def get_rent_record(self, record_id) -> RentRecord:
        record = self._records().filter(RentRecord.id == record_id).first()
        if record is None:
            raise NotFoundOrForbidden()
        return record

    def add_rent_record(self, tenant_id, month, amount, date_collected,
                        notes=None, mpesa_code=None) -> RentRecord:
        tenant = self.get_tenant(tenant_id) if tenant_id else None
        if tenant is None:
            raise ForeignKeyViolation()
        if not month:
            raise ValidationError("Month is required.")

        record = RentRecord(
            owner_id=self.user_id,
            tenant_id=tenant.id,
            month=month,
            amount=to_amount(amount),
            date_collected=date_collected,
            notes=notes or None,
            mpesa_code=mpesa_code,
        )
        db.session.add(record)
        db.session.commit()
        return record

    def update_rent_record(self, record_id, month, amount, date_collected, notes=None) -> bool:
        record = self._records().filter(RentRecord.id == record_id).first()
        if record is None:
            return False
        if not month:
            raise ValidationError("Month is required.")
        amount = to_amount(amount)

        record.month = month
        record.amount = amount
        record.date_collected = date_collected
        record.notes = notes or None
        db.session.commit()
        return True

    def delete_rent_record(self, record_id) -> bool:
        record = self._records().filter(RentRecord.id == record_id).first()
        if record is None:
            return False
        db.session.delete(record)
        db.session.commit()
        return True

    # -----------------------
    # Reconcile-or-create (parser flow)
    # -----------------------
    def get_or_create_tenant(self, name, phone):
        """Return ``(tenant, created)`` for ``phone``.

        An existing tenant keeps its stored name. A new one is inserted inside
        a savepoint; if a concurrent request inserted the same phone first the
        unique (owner, phone) constraint fires and the winner's row is used.
        """
        phone = normalize_phone(phone)
        tenant = self.find_tenant_by_phone(phone)
        if tenant is not None:
            return tenant, False

        try:
            with db.session.begin_nested():
                tenant = Tenant(owner_id=self.user_id, name=(name or phone).strip(), phone=phone)
                db.session.add(tenant)
        except IntegrityError:
            log.info("Tenant %s created concurrently for user %s, reusing", phone, self.user_id)
            tenant = self.find_tenant_by_phone(phone)
            if tenant is None:
                raise
            return tenant, False

        return tenant, True

    def record_parsed_payment(self, parsed, date_collected):
        """Attach a parsed M-PESA payment to its tenant, creating the tenant if new.

        The SMS date token is stored as the record's ``month``; the collection
        date is the insertion date passed in by the caller.
        """
        amount = to_amount(parsed.amount)
        tenant, created = self.get_or_create_tenant(parsed.name, parsed.phone)
        record = RentRecord(
            owner_id=self.user_id,
            tenant_id=tenant.id,
            month=parsed.date_token,
            amount=amount,
            date_collected=date_collected,
            mpesa_code=parsed.mpesa_code,
        )
        db.session.add(record)
        db.session.commit()
        log.info(
            "Parsed payment %s attached to %s tenant id=%s",
            parsed.mpesa_code or "-", "new" if created else "existing", tenant.id,
        )
        return record, created


def get_ledger() -> LedgerRepository:
    """Ledger for the logged-in user of the current request."""
    return LedgerRepository(current_user.id)
