# renttracker/forms.py
from flask_wtf import FlaskForm
from wtforms import (
    StringField,
    PasswordField,
    SubmitField,
    TextAreaField,
)
from wtforms.validators import (
    DataRequired,
    Optional,
    Length,
)

# ======================================================
# 🔑 LOGIN FORM
# ======================================================
class LoginForm(FlaskForm):
    username = StringField(
        "Username",
        validators=[DataRequired()],
        render_kw={
            "autocomplete": "username"
        }
    )

    password = PasswordField(
        "Password",
        validators=[DataRequired()],
        render_kw={
            "autocomplete": "current-password"
        }
    )

    submit = SubmitField("Login")


# ======================================================
# 🔐 SIGNUP FORM
# ======================================================
class SignupForm(FlaskForm):
    username = StringField(
        "Username",
        validators=[DataRequired(), Length(max=150)],
        render_kw={
            "autocomplete": "off",
            "autocapitalize": "off",
            "spellcheck": "false"
        }
    )

    password = PasswordField(
        "Password",
        validators=[DataRequired()],
        render_kw={
            "autocomplete": "new-password"
        }
    )

    submit = SubmitField("Sign up")


# ======================================================
# 🏠 TENANT FORM
# ======================================================
class TenantForm(FlaskForm):
    name = StringField(
        "Name",
        validators=[DataRequired(), Length(max=180)],
        render_kw={
            "autocomplete": "off"
        }
    )

    phone = StringField(
        "Phone",
        validators=[DataRequired(), Length(max=20)],
        render_kw={
            "autocomplete": "off",
            "inputmode": "tel"
        }
    )

    submit = SubmitField("Add Tenant")


# ======================================================
# 💰 RENT FORM (manual entry + edit)
# ======================================================
class RentForm(FlaskForm):
    tenant_id = StringField(
        "Tenant",
        validators=[Optional()],
    )

    month = StringField(
        "Month",
        validators=[DataRequired(), Length(max=40)],
        render_kw={
            "autocomplete": "off"
        }
    )

    amount = StringField(
        "Amount",
        validators=[DataRequired()],
        render_kw={
            "autocomplete": "off",
            "inputmode": "decimal"
        }
    )

    date_collected = StringField(
        "Date Collected (YYYY-MM-DD)",
        validators=[Optional(), Length(max=32)],
        render_kw={
            "autocomplete": "off"
        }
    )

    notes = StringField(
        "Notes",
        validators=[Optional(), Length(max=500)],
        render_kw={
            "autocomplete": "off"
        }
    )

    submit = SubmitField("Save")


# ======================================================
# 📲 M-PESA MESSAGE FORM
# ======================================================
class ParseForm(FlaskForm):
    message = TextAreaField(
        "M-PESA Message",
        validators=[DataRequired()],
    )

    submit = SubmitField("Record Payment")
