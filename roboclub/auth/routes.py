from flask import (
    render_template,
    request,
    redirect,
    url_for,
    session,
    flash,
    current_app,
    g,
    jsonify,
)
from firebase_admin import auth, firestore

from . import bp
from roboclub.core.constants import USERS_COLLECTION


@bp.route("/login", methods=["GET"])
def login():
    """
    Renders the login page.
    The actual login process is handled by the Firebase client-side SDK,
    which posts the resulting ID token to session_login.
    """
    if g.get("user") and session.get("is_admin"):
        return redirect(url_for("group.view_groups"))
    api_key = current_app.config.get("FIREBASE_API_KEY")
    if not api_key:
        current_app.logger.error(
            "FIREBASE_API_KEY is not set. Frontend will not be able to connect to Firebase."
        )
    return render_template("auth/login.html", firebase_api_key=api_key)


@bp.route("/session_login", methods=["POST"])
def session_login():
    """
    This endpoint is called from the client-side after a successful Firebase login.
    It receives the ID token, verifies it, and creates a server-side session.
    """
    payload = request.get_json(silent=True) or {}
    id_token = payload.get("idToken")
    if not id_token:
        return jsonify({"status": "error", "message": "Missing ID token."}), 400
    try:
        decoded_token = auth.verify_id_token(id_token)
        uid = decoded_token["uid"]
        db = firestore.client()
        user_doc = db.collection(USERS_COLLECTION).document(uid).get()
        if user_doc.exists:
            user_info = user_doc.to_dict() or {}
            roles = user_info.get("roles") or {}
            session["user_id"] = uid
            session["is_admin"] = bool(roles.get("isAdmin", False))
            return jsonify({"status": "success"})
        else:
            return jsonify({"status": "error", "message": "User not found in Firestore."}), 404
    except Exception as e:
        current_app.logger.error(f"Error during session login: {e}")
        return jsonify({"status": "error", "message": "Invalid token or server error."}), 401


@bp.route("/logout")
def logout():
    """
    The actual logout is handled by the Firebase client-side SDK.
    This route is for clearing any server-side session info.
    """
    session.clear()
    flash("You have been logged out.", "success")
    return redirect(url_for("auth.login"))
