"""Routes for the attendance blueprint."""

from firebase_admin import firestore
from flask import current_app, flash, g, redirect, render_template, request, url_for

from roboclub.activity.services import ActivityService
from roboclub.auth.decorators import login_required
from roboclub.core.constants import (
    ATTENDANCE_STATUS_LABELS,
    ATTENDANCE_STATUS_SHORT_LABELS,
)
from roboclub.errors import AppError, NotFoundError
from roboclub.member import services as member_services

from . import bp
from .forms import AttendanceEditForm, AttendanceForm
from .services import AttendanceService
from .stats import (
    build_attendance_summary,
    calculate_attendance_stats,
    users_with_attendance_status,
)


@bp.context_processor
def inject_status_labels():
    """Make the status labels available to every attendance template."""
    return dict(
        status_labels=ATTENDANCE_STATUS_LABELS,
        status_short_labels=ATTENDANCE_STATUS_SHORT_LABELS,
    )


@bp.route("/", methods=["GET"])
@login_required(admin_required=True)
def view_attendance():
    """List the activities of a period with their attendance counts."""
    db = firestore.client()
    or_period = request.args.get("or_period") or current_app.config["CURRENT_OR_PERIOD"]
    activities = ActivityService.get_activities(db, or_period)
    users = member_services.MemberService.get_active_caang(db)
    attendances = AttendanceService.get_attendances_by_or_period(db, or_period)

    overview = [
        {
            "activity": activity,
            "stats": calculate_attendance_stats(
                users_with_attendance_status(users, attendances, activity["id"])
            ),
        }
        for activity in activities
    ]
    return render_template(
        "attendance/overview.html",
        overview=overview,
        or_periods=ActivityService.get_or_periods(db),
        selected_period=or_period,
    )


@bp.route("/activity/<string:activity_id>", methods=["GET"])
@login_required(admin_required=True)
def view_activity_attendance(activity_id):
    """Show every member's status for one activity."""
    db = firestore.client()
    try:
        activity = ActivityService.get_activity(db, activity_id)
    except NotFoundError:
        flash("Activity not found.", "danger")
        return redirect(url_for(".view_attendance"))

    rows = users_with_attendance_status(
        member_services.MemberService.get_active_caang(db),
        AttendanceService.get_attendances_by_activity(db, activity_id),
        activity_id,
    )
    status = request.args.get("status")
    stats = calculate_attendance_stats(rows)
    if status:
        rows = [r for r in rows if r["status"] == status]
    return render_template(
        "attendance/activity.html",
        activity=activity,
        rows=rows,
        stats=stats,
        selected_status=status,
    )


@bp.route("/recap", methods=["GET"])
@login_required(admin_required=True)
def view_recap():
    """Show the per-member recap across all activities of a period."""
    db = firestore.client()
    or_period = request.args.get("or_period") or current_app.config["CURRENT_OR_PERIOD"]
    activities = ActivityService.get_activities(db, or_period)
    summary = build_attendance_summary(
        AttendanceService.get_attendances_by_or_period(db, or_period),
        activities,
        member_services.MemberService.get_active_caang(db),
    )
    return render_template(
        "attendance/recap.html",
        summary=summary,
        activities=activities,
        or_periods=ActivityService.get_or_periods(db),
        selected_period=or_period,
    )


@bp.route("/create", methods=["GET", "POST"])
@login_required(admin_required=True)
def create_attendance():
    """Record a member's attendance by hand."""
    db = firestore.client()
    or_period = current_app.config["CURRENT_OR_PERIOD"]
    activities = ActivityService.get_activities(db, or_period)

    form = AttendanceForm()
    form.activity_id.choices = [(a["id"], a.get("title", a["id"])) for a in activities]
    form.user_id.choices = [
        (m["id"], f"{m['fullName']} ({m['nim']})")
        for m in member_services.MemberService.get_active_caang(db)
    ]
    if request.method == "GET" and request.args.get("activity_id"):
        form.activity_id.data = request.args["activity_id"]

    if form.validate_on_submit():
        try:
            activity = ActivityService.get_activity(db, form.activity_id.data)
            AttendanceService.create_attendance(
                db,
                activity_id=activity["id"],
                user_id=form.user_id.data,
                or_period=activity.get("orPeriod", or_period),
                status=form.status.data,
                acting_user_id=g.user["uid"],
                admin_notes=form.admin_notes.data,
            )
            flash("Attendance recorded successfully.", "success")
            return redirect(
                url_for(".view_activity_attendance", activity_id=activity["id"])
            )
        except AppError as e:
            flash(e.message, "danger")
    return render_template("attendance/attendance_form.html", form=form, attendance=None)


@bp.route("/<string:attendance_id>/edit", methods=["GET", "POST"])
@login_required(admin_required=True)
def edit_attendance(attendance_id):
    """Correct the status or notes of an attendance record."""
    db = firestore.client()
    try:
        attendance = AttendanceService.get_attendance(db, attendance_id)
    except NotFoundError:
        flash("Attendance record not found.", "danger")
        return redirect(url_for(".view_attendance"))

    form = AttendanceEditForm(
        data={
            "status": attendance.get("status"),
            "admin_notes": attendance.get("adminNotes"),
        }
    )
    if form.validate_on_submit():
        try:
            AttendanceService.update_attendance(
                db,
                attendance_id,
                status=form.status.data,
                admin_notes=form.admin_notes.data,
            )
            flash("Attendance updated successfully.", "success")
            return redirect(
                url_for(
                    ".view_activity_attendance", activity_id=attendance["activityId"]
                )
            )
        except AppError as e:
            flash(e.message, "danger")
    return render_template(
        "attendance/attendance_form.html", form=form, attendance=attendance
    )


@bp.route("/<string:attendance_id>/delete", methods=["POST"])
@login_required(admin_required=True)
def delete_attendance(attendance_id):
    """Move an attendance record to the trash."""
    db = firestore.client()
    try:
        AttendanceService.soft_delete_attendance(db, attendance_id, g.user["uid"])
        flash("Attendance record moved to trash.", "success")
    except AppError as e:
        flash(e.message, "danger")
    return redirect(request.referrer or url_for(".view_attendance"))


@bp.route("/trash", methods=["GET"])
@login_required(admin_required=True)
def view_trash():
    """List the trashed attendance records."""
    db = firestore.client()
    return render_template(
        "attendance/trash.html",
        attendances=AttendanceService.get_deleted_attendances(db),
    )


@bp.route("/<string:attendance_id>/restore", methods=["POST"])
@login_required(admin_required=True)
def restore_attendance(attendance_id):
    """Restore a trashed attendance record."""
    db = firestore.client()
    try:
        AttendanceService.restore_attendance(db, attendance_id)
        flash("Attendance record restored.", "success")
    except AppError as e:
        flash(e.message, "danger")
    return redirect(url_for(".view_trash"))


@bp.route("/<string:attendance_id>/purge", methods=["POST"])
@login_required(admin_required=True)
def purge_attendance(attendance_id):
    """Delete an attendance record permanently."""
    db = firestore.client()
    try:
        AttendanceService.hard_delete_attendance(db, attendance_id)
        flash("Attendance record permanently deleted.", "success")
    except AppError as e:
        flash(e.message, "danger")
    return redirect(url_for(".view_trash"))
