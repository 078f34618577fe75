from flask import Blueprint, jsonify, make_response

from security.csrf import issue_csrf_token

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health():
    return jsonify(status="ok"), 200


@health_bp.get("/csrf")
def csrf_token():
    """Sets the csrf_token cookie; echo it back in X-CSRF-Token on writes."""
    resp = make_response(jsonify(message="CSRF token issued"), 200)
    return issue_csrf_token(resp)
