import logging
from flask import Flask, jsonify
from coffeebeat.config import DevelopmentConfig
from coffeebeat.errors import ApiError
from coffeebeat.extensions import db, migrate

def create_app(config_class=DevelopmentConfig):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config['LOG_LEVEL'])
    logging.getLogger('coffeebeat').setLevel(app.config['LOG_LEVEL'])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    from coffeebeat.services.booking_store import BookingStore
    app.extensions['booking_store'] = BookingStore()

    # Register Blueprints
    from coffeebeat.api.routes.auth import auth_bp
    from coffeebeat.api.routes.bookings import bookings_bp
    from coffeebeat.api.routes.tables import tables_bp
    from coffeebeat.api.routes.cart import cart_bp
    from coffeebeat.api.routes.preferences import preferences_bp
    from coffeebeat.api.routes.main import main_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(bookings_bp, url_prefix='/api/bookings')
    app.register_blueprint(tables_bp, url_prefix='/api/tables')
    app.register_blueprint(cart_bp, url_prefix='/api/cart')
    app.register_blueprint(preferences_bp, url_prefix='/api/preferences')
    app.register_blueprint(main_bp)

    @app.errorhandler(ApiError)
    def handle_api_error(e):
        if e.status_code >= 500:
            app.logger.error(f"{type(e).__name__}: {e.message}")
        return jsonify(e.to_dict()), e.status_code

    with app.app_context():
        db.create_all()

    if app.config['POLLER_ENABLED']:
        from coffeebeat.services.poller import start_poller
        app.extensions['booking_poller'] = start_poller(app)

    return app
