"""Forms for the activity blueprint."""

from flask_wtf import FlaskForm
from wtforms import BooleanField, DateTimeLocalField, StringField, TextAreaField
from wtforms.validators import DataRequired


class ActivityForm(FlaskForm):
    """Form for creating or editing a recruitment activity."""

    title = StringField("Title", validators=[DataRequired()])
    description = TextAreaField("Description")
    or_period = StringField("OR Period", validators=[DataRequired()])
    start_date_time = DateTimeLocalField(
        "Starts At", format="%Y-%m-%dT%H:%M", validators=[DataRequired()]
    )
    location = StringField("Location")
    is_active = BooleanField("Active", default=True)
