"""Forms for the group blueprint."""

from flask_wtf import FlaskForm
from wtforms import BooleanField, IntegerField, SelectField, StringField, TextAreaField
from wtforms.validators import DataRequired, NumberRange, Optional


class GroupParentForm(FlaskForm):
    """Form for creating or editing a parent group."""

    name = StringField("Group Name", validators=[DataRequired()])
    description = TextAreaField("Description")
    or_period = StringField("OR Period", validators=[DataRequired()])
    is_active = BooleanField("Active", default=True)


class GenerateSubGroupsForm(FlaskForm):
    """Form for generating attendance-balanced sub-groups."""

    group_count = IntegerField(
        "Number of Groups", validators=[DataRequired(), NumberRange(min=1)]
    )


class EmptySubGroupsForm(FlaskForm):
    """Form for creating empty sub-groups to fill by hand."""

    count = IntegerField(
        "Number of Groups", validators=[DataRequired(), NumberRange(min=1)]
    )
    starting_number = IntegerField(
        "Starting Number", validators=[Optional(), NumberRange(min=1)]
    )


class LeaderForm(FlaskForm):
    """Form for choosing a group leader."""

    leader = SelectField("Leader", validators=[Optional()])
