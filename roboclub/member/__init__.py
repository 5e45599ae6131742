"""The member blueprint."""

from flask import Blueprint

bp = Blueprint("member", __name__, url_prefix="/member", template_folder="templates")

from . import routes  # noqa: E402, F401
