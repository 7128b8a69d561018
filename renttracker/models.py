# models.py
from datetime import datetime
from decimal import Decimal

from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

from renttracker.extensions import db


# ==============================================================
# USER MODEL (Each user owns their own tenants + rent records)
# ==============================================================
class User(db.Model, UserMixin):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(150), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    tenants = db.relationship("Tenant", backref="owner", cascade="all, delete-orphan")
    rent_records = db.relationship("RentRecord", backref="owner", cascade="all, delete-orphan")

    # Auth helpers
    def set_password(self, pwd: str):
        self.password_hash = generate_password_hash(pwd)

    def check_password(self, pwd: str) -> bool:
        return check_password_hash(self.password_hash, pwd)

    def __repr__(self):
        return f"<User {self.username}>"


# ==============================================================
# TENANT MODEL (phone is unique per owner)
# ==============================================================
class Tenant(db.Model):
    __tablename__ = "tenants"
    __table_args__ = (
        db.UniqueConstraint("owner_id", "phone", name="uq_tenant_owner_phone"),
    )

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    name = db.Column(db.String(180), nullable=False)
    phone = db.Column(db.String(20), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    rent_records = db.relationship("RentRecord", backref="tenant", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Tenant {self.name} {self.phone}>"


# ==============================================================
# RENT RECORD MODEL
# month is a free label; date_collected is stored as text
# ==============================================================
class RentRecord(db.Model):
    __tablename__ = "rent"

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)

    month = db.Column(db.String(40), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    date_collected = db.Column(db.String(32), nullable=False)
    notes = db.Column(db.String(500))
    mpesa_code = db.Column(db.String(20))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    @property
    def tenant_name(self) -> str:
        return self.tenant.name if self.tenant else ""

    def __repr__(self):
        return f"<RentRecord {self.id} {self.month} {self.amount}>"


# ==============================================================
# AUDIT LOG MODEL
# ==============================================================
class AuditLog(db.Model):
    __tablename__ = "audit_log"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    action = db.Column(db.String(200), nullable=False)
    meta = db.Column(db.String(1000))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
