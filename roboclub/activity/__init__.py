"""The activity blueprint."""

from flask import Blueprint

bp = Blueprint("activity", __name__, url_prefix="/activity", template_folder="templates")

from . import routes  # noqa: E402, F401
