import logging

from flask import Flask, request, g, jsonify
from config import Config
from routes import health_bp, booking_bp, ground_bp, admin_bp

from models import db
from flask_migrate import Migrate
from services.bookings import build_booking_service
from services.errors import BookingError
from utils.seed import seed_roles
from utils.auth_context import load_current_user
from security.csrf import require_csrf, uses_cookie_auth


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(ground_bp)
    app.register_blueprint(admin_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    app.extensions["booking_service"] = build_booking_service(app.config)

    # Seed default roles at startup (safe & idempotent)
    if app.config.get("SEED_ROLES_ON_STARTUP", True):
        with app.app_context():
            seed_roles()

    @app.errorhandler(BookingError)
    def _booking_error(exc):
        return jsonify(success=False, error=exc.message), exc.status_code

    @app.before_request
    def _load_user():
        load_current_user()

    CSRF_EXEMPT_PATHS = {
    "/health",
    "/csrf",
    }

    @app.before_request
    def _csrf_protect():
        # Only protect state-changing requests
        if request.method in ("POST", "PUT", "PATCH", "DELETE"):
            if request.path in CSRF_EXEMPT_PATHS:
                return None

            # Only enforce CSRF for cookie-authenticated users
            if getattr(g, "user", None) is not None and uses_cookie_auth():
                failure = require_csrf()
                if failure:
                    return failure

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp


    register_cli(app)


    return app

#-------------------------
import json
import click
from models.user import User, Role
from models.ground import Ground
from security.session import create_session
from services.catalog import parse_ranges
from services.errors import ValidationError
from utils.roles import ADMIN, DEFAULT_ROLES, PLAYER

def _get_role(name):
    role = Role.query.filter_by(name=name).first()
    if not role:
        role = Role(name=name)
        db.session.add(role)
    return role

def register_cli(app):
    @app.cli.command("create-user")
    @click.argument("email")
    @click.option("--role", "roles", multiple=True, default=[PLAYER],
                  type=click.Choice(DEFAULT_ROLES, case_sensitive=False))
    @click.option("--name", "full_name", default=None)
    def create_user(email, roles, full_name):
        """Create a user with the given role(s)."""
        email = email.strip().lower()
        if User.query.filter_by(email=email).first():
            raise click.ClickException("User already exists")

        user = User(email=email, full_name=full_name)
        user.roles = [_get_role(r.upper()) for r in roles]
        db.session.add(user)
        db.session.commit()
        click.echo(f"Created user {user.id} <{user.email}> roles={sorted(user.role_names)}")

    @app.cli.command("make-admin")
    @click.argument("email")
    def make_admin(email):
        """Promote a user to ADMIN by email (bootstrap)."""
        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user:
            raise click.ClickException("User not found")

        admin_role = _get_role(ADMIN)
        if admin_role not in user.roles:
            user.roles.append(admin_role)
        db.session.commit()

        click.echo(f"{user.email} promoted to ADMIN")

    @app.cli.command("issue-session")
    @click.argument("email")
    def issue_session(email):
        """Print a raw session token (send as cookie or Bearer header)."""
        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user:
            raise click.ClickException("User not found")
        click.echo(create_session(user.id, ip="cli", user_agent="flask issue-session"))

    @app.cli.command("create-ground")
    @click.argument("name")
    @click.option("--owner", "owner_email", required=True)
    @click.option("--location", default=None)
    @click.option("--per-hour", type=int, default=None)
    @click.option("--ranges", "ranges_json", default=None,
                  help='JSON list, e.g. [{"start": "20:00", "end": "08:00", "perHour": 300}]')
    @click.option("--discount", type=int, default=0)
    @click.option("--currency", default=None)
    def create_ground(name, owner_email, location, per_hour, ranges_json, discount, currency):
        """Register a bookable ground owned by OWNER."""
        owner = User.query.filter_by(email=owner_email.strip().lower()).first()
        if not owner:
            raise click.ClickException("Owner not found")

        ranges = None
        if ranges_json:
            try:
                ranges = json.loads(ranges_json)
                parse_ranges(ranges)
            except (ValueError, ValidationError) as exc:
                raise click.ClickException(f"Invalid ranges: {exc}")

        ground = Ground(
            name=name.strip(),
            location=location,
            price_per_hour=per_hour,
            price_ranges=ranges,
            discount=discount,
            currency=currency or app.config.get("DEFAULT_CURRENCY", "INR"),
            owner_user_id=owner.id,
        )
        db.session.add(ground)
        db.session.commit()
        click.echo(f"Created ground {ground.id} ({ground.name})")

#-------------------------




if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
