# audit.py
import logging

from sqlalchemy.exc import SQLAlchemyError

from renttracker.extensions import db
from renttracker.models import AuditLog

log = logging.getLogger(__name__)


def audit(user, action, meta=""):
    """Best-effort audit row; a failure here never fails the request."""
    try:
        entry = AuditLog(user_id=(user.id if user else None),
                         action=action, meta=str(meta))
        db.session.add(entry)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        log.warning("Audit log failed for %s: %s", action, e)
