# accounts.py
import logging

from sqlalchemy.exc import IntegrityError

from renttracker.errors import AuthFailure, DuplicateUsername, ValidationError
from renttracker.extensions import db
from renttracker.models import User

log = logging.getLogger(__name__)


def register(username: str, password: str) -> User:
    """Create a user. The plaintext password is only ever hashed."""
    if not username or not password:
        raise ValidationError()

    if User.query.filter_by(username=username).first():
        raise DuplicateUsername()

    user = User(username=username)
    user.set_password(password)

    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        # lost a race against another signup with the same name
        db.session.rollback()
        raise DuplicateUsername()

    log.info("Registered user id=%s username=%s", user.id, username)
    return user


def authenticate(username: str, password: str) -> User:
    user = User.query.filter_by(username=username).first() if username else None
    if not user or not password or not user.check_password(password):
        raise AuthFailure()
    return user
