from __future__ import annotations

from flask import jsonify, request
from flask.views import MethodView
from flask_login import current_user


def error_response(code: str, status: int):
    return jsonify({"error": code}), status


def json_field(name: str) -> str | None:
    """Stripped string field from the JSON body, or None when missing/blank."""
    data = request.get_json(silent=True) or {}
    value = data.get(name)
    if not isinstance(value, str):
        return None
    return value.strip() or None


class LoginRequiredMixin(MethodView):
    def dispatch_request(self, *args, **kwargs):
        if not current_user.is_authenticated:
            return error_response("error.auth.required", 401)
        return super().dispatch_request(*args, **kwargs)
