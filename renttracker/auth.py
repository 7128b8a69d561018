# renttracker/auth.py
import logging

from flask import Blueprint, current_app, redirect, render_template, request, url_for
from flask_login import current_user, login_required, login_user, logout_user

from renttracker.accounts import authenticate, register
from renttracker.audit import audit
from renttracker.errors import AuthFailure, DuplicateUsername, RateLimited, ValidationError
from renttracker.extensions import db, limiter, login_manager
from renttracker.forms import LoginForm, SignupForm
from renttracker.models import User

log = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)


@login_manager.user_loader
def load_user(user_id):
    try:
        return db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        return None


def _throttle():
    return current_app.extensions["login_throttle"]


def _login_rate_limit():
    return current_app.config.get("LOGIN_RATE_LIMIT", "30 per minute")


# -----------------------
# Login
# -----------------------
@auth_bp.route("/login", methods=["GET"])
def login():
    if current_user.is_authenticated:
        return redirect(url_for("rent.dashboard"))
    return render_template("login.html", form=LoginForm(), error=None)


@auth_bp.route("/login", methods=["POST"])
@limiter.limit(_login_rate_limit)
def login_post():
    form = LoginForm()
    address = request.remote_addr or "unknown"
    throttle = _throttle()

    try:
        if throttle.is_locked(address):
            raise RateLimited()

        if not form.validate_on_submit():
            raise AuthFailure()
        user = authenticate(form.username.data.strip(), form.password.data)

    except RateLimited as e:
        log.warning("Login throttled for %s", address)
        return render_template("login.html", form=form, error=e.message), e.status_code

    except AuthFailure as e:
        throttle.record_failure(address)
        log.info("Failed login from %s", address)
        return render_template("login.html", form=form, error=e.message), e.status_code

    throttle.record_success(address)
    login_user(user)
    audit(user, "user_logged_in", f"id:{user.id}")
    log.info("User %s logged in from %s", user.id, address)
    return redirect(url_for("rent.dashboard"))


# -----------------------
# Signup
# -----------------------
@auth_bp.route("/signup", methods=["GET", "POST"])
def signup():
    form = SignupForm()

    if request.method == "POST":
        try:
            if not form.validate_on_submit():
                raise ValidationError()
            user = register(form.username.data.strip(), form.password.data)
        except (ValidationError, DuplicateUsername) as e:
            return render_template("signup.html", form=form, error=e.message), e.status_code

        audit(user, "user_registered", f"username:{user.username}")
        login_user(user)
        return redirect(url_for("rent.dashboard"))

    return render_template("signup.html", form=form, error=None)


# -----------------------
@auth_bp.route("/logout")
@login_required
def logout():
    log.info("User %s logged out", current_user.id)
    logout_user()
    return redirect(url_for("auth.login"))
