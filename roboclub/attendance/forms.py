"""Forms for the attendance blueprint."""

from flask_wtf import FlaskForm
from wtforms import SelectField, TextAreaField
from wtforms.validators import DataRequired

from roboclub.core.constants import ATTENDANCE_STATUS_LABELS

STATUS_CHOICES = list(ATTENDANCE_STATUS_LABELS.items())


class AttendanceForm(FlaskForm):
    """Form for recording a member's attendance by hand."""

    activity_id = SelectField("Activity", validators=[DataRequired()])
    user_id = SelectField("Member", validators=[DataRequired()])
    status = SelectField("Status", choices=STATUS_CHOICES, validators=[DataRequired()])
    admin_notes = TextAreaField("Admin Notes")


class AttendanceEditForm(FlaskForm):
    """Form for correcting an attendance record."""

    status = SelectField("Status", choices=STATUS_CHOICES, validators=[DataRequired()])
    admin_notes = TextAreaField("Admin Notes")
