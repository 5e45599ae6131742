"""The attendance blueprint."""

from flask import Blueprint

bp = Blueprint(
    "attendance", __name__, url_prefix="/attendance", template_folder="templates"
)

from . import routes  # noqa: E402, F401
