"""Routes for the activity blueprint."""

from firebase_admin import firestore
from flask import current_app, flash, g, redirect, render_template, request, url_for

from roboclub.auth.decorators import login_required
from roboclub.errors import AppError, NotFoundError

from . import bp
from .forms import ActivityForm
from .services import ActivityService


@bp.route("/", methods=["GET"])
@login_required(admin_required=True)
def view_activities():
    """List the activities of an OR period."""
    db = firestore.client()
    or_period = request.args.get("or_period") or current_app.config["CURRENT_OR_PERIOD"]
    return render_template(
        "activity/activities.html",
        activities=ActivityService.get_activities(db, or_period),
        or_periods=ActivityService.get_or_periods(db),
        selected_period=or_period,
    )


@bp.route("/create", methods=["GET", "POST"])
@login_required(admin_required=True)
def create_activity():
    """Create a new activity."""
    form = ActivityForm()
    if request.method == "GET" and not form.or_period.data:
        form.or_period.data = current_app.config["CURRENT_OR_PERIOD"]

    if form.validate_on_submit():
        db = firestore.client()
        try:
            ActivityService.create_activity(
                db,
                title=form.title.data,
                or_period=form.or_period.data,
                start_date_time=form.start_date_time.data,
                acting_user_id=g.user["uid"],
                description=form.description.data,
                location=form.location.data,
                is_active=form.is_active.data,
            )
            flash("Activity created successfully.", "success")
            return redirect(url_for(".view_activities", or_period=form.or_period.data))
        except AppError as e:
            flash(e.message, "danger")
    return render_template("activity/activity_form.html", form=form, activity=None)


@bp.route("/<string:activity_id>/edit", methods=["GET", "POST"])
@login_required(admin_required=True)
def edit_activity(activity_id):
    """Edit an activity."""
    db = firestore.client()
    try:
        activity = ActivityService.get_activity(db, activity_id)
    except NotFoundError:
        flash("Activity not found.", "danger")
        return redirect(url_for(".view_activities"))

    form = ActivityForm(
        data={
            "title": activity.get("title"),
            "description": activity.get("description"),
            "or_period": activity.get("orPeriod"),
            "start_date_time": activity.get("startDateTime"),
            "location": activity.get("location"),
            "is_active": activity.get("isActive", True),
        }
    )
    if form.validate_on_submit():
        try:
            ActivityService.update_activity(
                db,
                activity_id,
                title=form.title.data,
                description=form.description.data,
                orPeriod=form.or_period.data,
                startDateTime=form.start_date_time.data,
                location=form.location.data,
                isActive=form.is_active.data,
            )
            flash("Activity updated successfully.", "success")
            return redirect(url_for(".view_activities", or_period=form.or_period.data))
        except AppError as e:
            flash(e.message, "danger")
    return render_template("activity/activity_form.html", form=form, activity=activity)


@bp.route("/<string:activity_id>/delete", methods=["POST"])
@login_required(admin_required=True)
def delete_activity(activity_id):
    """Move an activity to the trash."""
    db = firestore.client()
    try:
        ActivityService.soft_delete_activity(db, activity_id, g.user["uid"])
        flash("Activity moved to trash.", "success")
    except AppError as e:
        flash(e.message, "danger")
    return redirect(url_for(".view_activities"))


@bp.route("/trash", methods=["GET"])
@login_required(admin_required=True)
def view_trash():
    """List the trashed activities."""
    db = firestore.client()
    return render_template(
        "activity/trash.html", activities=ActivityService.get_deleted_activities(db)
    )


@bp.route("/<string:activity_id>/restore", methods=["POST"])
@login_required(admin_required=True)
def restore_activity(activity_id):
    """Restore a trashed activity."""
    db = firestore.client()
    try:
        ActivityService.restore_activity(db, activity_id)
        flash("Activity restored successfully.", "success")
    except AppError as e:
        flash(e.message, "danger")
    return redirect(url_for(".view_trash"))
