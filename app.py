# app.py: TravelSphere main Flask app

from datetime import date
from decimal import Decimal

import click
from dateutil.relativedelta import relativedelta
from flask import Flask
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import generate_password_hash

import config
from database import db
from errors import register_error_handlers

logger = config.get_logger(__name__)

SAMPLE_PROMO_CODES = [
    # code, type, value, min amount, max uses, months valid from the seed date
    ("WELCOME10", "percentage", "10.00", "1000", 100, 12),
    ("FLAT500", "fixed", "500.00", "2000", 50, 6),
    ("STUDENT15", "percentage", "15.00", "500", None, 12),
]


def create_app(overrides=None):
    # === Initialize Flask app ===
    app = Flask(__name__, static_folder="public", static_url_path="")
    app.config.update(config.flask_settings())
    if overrides:
        app.config.update(overrides)

    # === Initialize database ===
    db.init_app(app)

    # === Import models AFTER db.init_app ===
    import models  # noqa: F401

    # === Register blueprints ===
    from travel_api import admin_bp, travel_bp
    app.register_blueprint(travel_bp)
    app.register_blueprint(admin_bp)

    # === Error handling ===
    register_error_handlers(app)

    # === Create tables; an unreachable store aborts startup ===
    with app.app_context():
        try:
            db.create_all()
        except SQLAlchemyError:
            logger.critical("Could not reach the database at startup", exc_info=True)
            raise

    register_commands(app)

    logger.debug("Registered routes: " + ", ".join(sorted(str(rule) for rule in app.url_map.iter_rules())))
    return app


def register_commands(app):
    @app.cli.command("init-db")
    def init_db_command():
        """Create all tables."""
        db.create_all()
        click.echo("Database initialised.")

    @app.cli.command("seed")
    def seed_command():
        """Create the admin account, a sample student and the sample promo codes."""
        from models import PromoCode, User
        import db as store

        if not config.ADMIN_PASSWORD:
            raise click.ClickException("ADMIN_PASSWORD is not set in the environment")
        if not config.STUDENT_PASSWORD:
            raise click.ClickException("STUDENT_PASSWORD is not set in the environment")

        seed_users = [
            (config.ADMIN_NAME, config.ADMIN_EMAIL, config.ADMIN_PASSWORD, True, False),
            (config.STUDENT_NAME, config.STUDENT_EMAIL, config.STUDENT_PASSWORD, False, True),
        ]
        for name, email, password, is_admin, is_student in seed_users:
            if store.find_user_by_email(email.lower()) is not None:
                continue
            store.insert_user(User(
                name=name,
                email=email.lower(),
                password=generate_password_hash(password),
                is_admin=is_admin,
                is_student=is_student,
            ))
            click.echo(f"Created {'admin' if is_admin else 'student'} {email}")

        today = date.today()
        for code, kind, value, minimum, max_uses, months in SAMPLE_PROMO_CODES:
            if store.find_promo_code(code) is not None:
                continue
            valid_until = today + relativedelta(months=months)
            store.insert_promo_code(PromoCode(
                code=code,
                discount_type=kind,
                discount_value=Decimal(value),
                min_booking_amount=Decimal(minimum),
                max_uses=max_uses,
                valid_from=today,
                valid_until=valid_until,
            ))
            click.echo(f"Created promo code {code} (valid until {valid_until})")


# === Dev-only Debugging ===
if __name__ == "__main__":
    app = create_app()
    if config.FLASK_ENV == "development" and config.get_bool("DEBUGPY"):
        import debugpy
        debugpy.listen(("0.0.0.0", 5681))
        logger.info("Waiting for debugger connection...")
    app.run(host="0.0.0.0", port=config.PORT, debug=app.config["DEBUG"], use_reloader=False)
