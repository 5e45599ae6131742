"""Routes for the group blueprint."""

from firebase_admin import firestore
from flask import current_app, flash, g, redirect, render_template, request, url_for

from roboclub.auth.decorators import login_required
from roboclub.errors import AppError, NotFoundError

from . import bp
from .forms import EmptySubGroupsForm, GenerateSubGroupsForm, GroupParentForm, LeaderForm
from .services import GroupService


def _attendance_settings():
    """Return the attendance weighting configured for the app."""
    return {
        "late_weight": current_app.config["ATTENDANCE_LATE_WEIGHT"],
        "low_threshold": current_app.config["LOW_ATTENDANCE_THRESHOLD"],
    }


@bp.route("/", methods=["GET"])
@login_required(admin_required=True)
def view_groups():
    """Display the parent groups, optionally filtered by period and status."""
    db = firestore.client()
    or_period = request.args.get("or_period") or None
    status = request.args.get("status", "all")
    is_active = {"active": True, "inactive": False}.get(status)

    parents = GroupService.get_group_parents(db, or_period=or_period, is_active=is_active)
    return render_template(
        "group/groups.html",
        parents=parents,
        or_periods=GroupService.get_or_periods(db),
        selected_period=or_period,
        selected_status=status,
    )


@bp.route("/create", methods=["GET", "POST"])
@login_required(admin_required=True)
def create_group():
    """Create a new parent group."""
    form = GroupParentForm()
    if request.method == "GET" and not form.or_period.data:
        form.or_period.data = current_app.config["CURRENT_OR_PERIOD"]

    if form.validate_on_submit():
        db = firestore.client()
        try:
            group_id = GroupService.create_group_parent(
                db,
                name=form.name.data,
                or_period=form.or_period.data,
                acting_user_id=g.user["uid"],
                description=form.description.data,
                is_active=form.is_active.data,
            )
            flash("Group created successfully.", "success")
            return redirect(url_for(".view_group", group_id=group_id))
        except AppError as e:
            flash(e.message, "danger")
    return render_template("group/group_form.html", form=form, group=None)


@bp.route("/<string:group_id>", methods=["GET"])
@login_required(admin_required=True)
def view_group(group_id):
    """Display a parent group with its sub-groups and the unassigned members."""
    db = firestore.client()
    try:
        group = GroupService.get_group_parent(db, group_id)
    except NotFoundError:
        flash("Group not found.", "danger")
        return redirect(url_for(".view_groups"))

    sub_groups = GroupService.get_sub_groups(db, group_id)
    unassigned = GroupService.get_unassigned_caang(
        db, group_id, **_attendance_settings()
    )
    search = request.args.get("search", "").strip().lower()
    if search:
        sub_groups = [
            s
            for s in sub_groups
            if search in s.get("name", "").lower()
            or any(search in m.get("fullName", "").lower() for m in s.get("members", []))
        ]

    leader_form = LeaderForm()
    leader_form.leader.choices = [("", "No leader")] + [
        (m["userId"], m["fullName"]) for s in sub_groups for m in s.get("members", [])
    ]
    return render_template(
        "group/group.html",
        group=group,
        group_id=group_id,
        sub_groups=sub_groups,
        unassigned=unassigned,
        generate_form=GenerateSubGroupsForm(),
        empty_form=EmptySubGroupsForm(),
        leader_form=leader_form,
        search=search,
    )


@bp.route("/<string:group_id>/edit", methods=["GET", "POST"])
@login_required(admin_required=True)
def edit_group(group_id):
    """Edit a parent group."""
    db = firestore.client()
    try:
        group = GroupService.get_group_parent(db, group_id)
    except NotFoundError:
        flash("Group not found.", "danger")
        return redirect(url_for(".view_groups"))

    form = GroupParentForm(
        data={
            "name": group.get("name"),
            "description": group.get("description"),
            "or_period": group.get("orPeriod"),
            "is_active": group.get("isActive", True),
        }
    )
    if form.validate_on_submit():
        try:
            GroupService.update_group_parent(
                db,
                group_id,
                name=form.name.data,
                description=form.description.data,
                or_period=form.or_period.data,
                is_active=form.is_active.data,
            )
            flash("Group updated successfully.", "success")
            return redirect(url_for(".view_group", group_id=group_id))
        except AppError as e:
            flash(e.message, "danger")
    return render_template("group/group_form.html", form=form, group=group)


@bp.route("/<string:group_id>/delete", methods=["POST"])
@login_required(admin_required=True)
def delete_group(group_id):
    """Move a parent group to the trash."""
    db = firestore.client()
    try:
        GroupService.soft_delete_group_parent(db, group_id, g.user["uid"])
        flash("Group moved to trash.", "success")
    except AppError as e:
        flash(e.message, "danger")
    return redirect(url_for(".view_groups"))


@bp.route("/trash", methods=["GET"])
@login_required(admin_required=True)
def view_trash():
    """Display the trashed parent groups."""
    db = firestore.client()
    return render_template(
        "group/trash.html", groups=GroupService.get_deleted_group_parents(db)
    )


@bp.route("/<string:group_id>/restore", methods=["POST"])
@login_required(admin_required=True)
def restore_group(group_id):
    """Restore a trashed parent group."""
    db = firestore.client()
    try:
        GroupService.restore_group_parent(db, group_id)
        flash("Group restored successfully.", "success")
    except AppError as e:
        flash(e.message, "danger")
    return redirect(url_for(".view_trash"))


@bp.route("/<string:group_id>/purge", methods=["POST"])
@login_required(admin_required=True)
def purge_group(group_id):
    """Permanently delete a parent group and its sub-groups."""
    db = firestore.client()
    try:
        GroupService.permanent_delete_group_parent(db, group_id)
        flash("Group permanently deleted.", "success")
    except AppError as e:
        flash(e.message, "danger")
    return redirect(url_for(".view_trash"))


@bp.route("/<string:group_id>/generate", methods=["POST"])
@login_required(admin_required=True)
def generate_sub_groups(group_id):
    """Generate attendance-balanced sub-groups from the active roster."""
    form = GenerateSubGroupsForm()
    if not form.validate_on_submit():
        flash("Number of groups must be at least 1.", "danger")
        return redirect(url_for(".view_group", group_id=group_id))

    db = firestore.client()
    try:
        result = GroupService.generate_sub_groups(
            db,
            group_id,
            form.group_count.data,
            g.user["uid"],
            **_attendance_settings(),
        )
        flash(
            f"Generated {result['createdCount']} groups with "
            f"{result['totalMembers']} members.",
            "success",
        )
    except AppError as e:
        flash(e.message, "danger")
    return redirect(url_for(".view_group", group_id=group_id))


@bp.route("/<string:group_id>/empty", methods=["POST"])
@login_required(admin_required=True)
def create_empty_sub_groups(group_id):
    """Create empty sub-groups for manual assignment."""
    form = EmptySubGroupsForm()
    if not form.validate_on_submit():
        flash("Number of groups must be at least 1.", "danger")
        return redirect(url_for(".view_group", group_id=group_id))

    db = firestore.client()
    try:
        result = GroupService.create_empty_sub_groups(
            db,
            group_id,
            form.count.data,
            g.user["uid"],
            starting_number=form.starting_number.data,
        )
        flash(f"Created {result['createdCount']} empty groups.", "success")
    except AppError as e:
        flash(e.message, "danger")
    return redirect(url_for(".view_group", group_id=group_id))


@bp.route("/<string:group_id>/members", methods=["GET", "POST"])
@login_required(admin_required=True)
def edit_members(group_id):
    """Move members between the sub-groups of a parent group."""
    db = firestore.client()
    try:
        group = GroupService.get_group_parent(db, group_id)
    except NotFoundError:
        flash("Group not found.", "danger")
        return redirect(url_for(".view_groups"))

    sub_groups = GroupService.get_sub_groups(db, group_id)
    if request.method == "POST":
        updates = [
            {
                "subGroupId": sub_group["id"],
                "memberIds": request.form.getlist(f"members-{sub_group['id']}"),
                "leaderId": request.form.get(f"leader-{sub_group['id']}") or None,
            }
            for sub_group in sub_groups
        ]
        try:
            GroupService.update_sub_group_members(
                db, group_id, updates, **_attendance_settings()
            )
            flash("Group members updated successfully.", "success")
            return redirect(url_for(".view_group", group_id=group_id))
        except AppError as e:
            flash(e.message, "danger")

    unassigned = GroupService.get_unassigned_caang(
        db, group_id, **_attendance_settings()
    )
    return render_template(
        "group/edit_members.html",
        group=group,
        group_id=group_id,
        sub_groups=sub_groups,
        unassigned=unassigned,
    )


@bp.route("/<string:group_id>/refresh", methods=["POST"])
@login_required(admin_required=True)
def refresh_snapshots(group_id):
    """Recompute the attendance figures stored on every sub-group member."""
    db = firestore.client()
    try:
        count = GroupService.refresh_member_snapshots(
            db, group_id, **_attendance_settings()
        )
        flash(f"Refreshed attendance for {count} groups.", "success")
    except AppError as e:
        flash(e.message, "danger")
    return redirect(url_for(".view_group", group_id=group_id))


@bp.route("/<string:group_id>/leader", methods=["POST"])
@login_required(admin_required=True)
def set_group_leader(group_id):
    """Set the overall leader of a parent group."""
    db = firestore.client()
    leader_id = request.form.get("leader")
    if not leader_id:
        flash("Please choose a leader.", "warning")
        return redirect(url_for(".view_group", group_id=group_id))
    try:
        GroupService.set_group_parent_leader(db, group_id, leader_id)
        flash("Group leader updated.", "success")
    except AppError as e:
        flash(e.message, "danger")
    return redirect(url_for(".view_group", group_id=group_id))


@bp.route("/<string:group_id>/sub/<string:sub_group_id>/leader", methods=["POST"])
@login_required(admin_required=True)
def set_sub_group_leader(group_id, sub_group_id):
    """Set or clear the leader of a sub-group."""
    db = firestore.client()
    try:
        GroupService.set_sub_group_leader(
            db, group_id, sub_group_id, request.form.get("leader") or None
        )
        flash("Sub-group leader updated.", "success")
    except AppError as e:
        flash(e.message, "danger")
    return redirect(url_for(".view_group", group_id=group_id))


@bp.route("/<string:group_id>/sub/<string:sub_group_id>/delete", methods=["POST"])
@login_required(admin_required=True)
def delete_sub_group(group_id, sub_group_id):
    """Delete a sub-group permanently."""
    db = firestore.client()
    try:
        GroupService.delete_sub_group(db, group_id, sub_group_id)
        flash("Sub-group deleted.", "success")
    except AppError as e:
        flash(e.message, "danger")
    return redirect(url_for(".view_group", group_id=group_id))
