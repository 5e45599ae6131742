"""Routes for the member blueprint."""

from firebase_admin import firestore
from flask import current_app, render_template, request

from roboclub.auth.decorators import login_required

from . import bp
from .services import MemberService


@bp.route("/", methods=["GET"])
@login_required(admin_required=True)
def view_members():
    """List the active caang with their attendance for a period."""
    db = firestore.client()
    or_period = request.args.get("or_period") or current_app.config["CURRENT_OR_PERIOD"]
    members = MemberService.get_caang_with_attendance(
        db,
        or_period,
        late_weight=current_app.config["ATTENDANCE_LATE_WEIGHT"],
        low_threshold=current_app.config["LOW_ATTENDANCE_THRESHOLD"],
    )

    search = request.args.get("search", "").strip().lower()
    if search:
        members = [
            m
            for m in members
            if search in m["fullName"].lower() or search in m["nim"].lower()
        ]
    if request.args.get("low") == "1":
        members = [m for m in members if m["isLowAttendance"]]

    members.sort(key=lambda m: m["attendancePercentage"], reverse=True)
    return render_template(
        "member/members.html",
        members=members,
        selected_period=or_period,
        search=search,
    )
