from __future__ import annotations

from flask import Blueprint, jsonify
from flask.views import MethodView
from flask_login import login_user, logout_user, current_user
from flask_wtf.csrf import generate_csrf

from ..extensions import db
from ..models import User
from ..policies import LoginRequiredMixin, error_response, json_field
from ..security import hash_client_key, verify_client_key


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _user_json(user: User) -> dict:
    return {"id": user.id, "name": user.name}


class RegisterView(MethodView):
    def post(self):
        name = json_field("name")
        client_hash = (json_field("client_hash") or "").lower()

        if not name or not client_hash:
            return error_response("error.request.invalid", 400)

        if User.query.filter_by(name=name).first():
            return error_response("error.user.nameTaken", 400)

        user = User(name=name, passkey_hash=hash_client_key(client_hash))
        db.session.add(user)
        db.session.commit()

        return jsonify(_user_json(user)), 201


class LoginView(MethodView):
    def post(self):
        name = json_field("name")
        client_hash = (json_field("client_hash") or "").lower()

        if not name:
            return error_response("error.request.invalid", 400)

        user = User.query.filter_by(name=name).first()
        if not user or not client_hash or not verify_client_key(client_hash, user.passkey_hash):
            return error_response("error.auth.invalidCredentials", 401)

        login_user(user)
        return jsonify(_user_json(user))


class LogoutView(MethodView):
    def post(self):
        if current_user.is_authenticated:
            logout_user()
        return "", 204


class CsrfTokenView(MethodView):
    """Token for the X-CSRFToken header of every state-changing request."""
    def get(self):
        return jsonify({"csrfToken": generate_csrf()})


class MeView(LoginRequiredMixin):
    def get(self):
        return jsonify(_user_json(current_user))


auth_bp.add_url_rule("/register", view_func=RegisterView.as_view("register"), methods=["POST"])
auth_bp.add_url_rule("/login", view_func=LoginView.as_view("login"), methods=["POST"])
auth_bp.add_url_rule("/logout", view_func=LogoutView.as_view("logout"), methods=["POST"])
auth_bp.add_url_rule("/me", view_func=MeView.as_view("me"), methods=["GET"])
auth_bp.add_url_rule("/csrf", view_func=CsrfTokenView.as_view("csrf"), methods=["GET"])
