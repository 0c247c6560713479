import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

from ..errors import (
    DanglingReferenceError,
    DuplicateEntityError,
    InvalidPageRequestError,
    InvalidTransitionError,
    NoLandlordSelectedError,
    OutsidePortfolioError,
    StaleMutationError,
)

logger = logging.getLogger(__name__)


# Register all blueprints here
def register_blueprints(app):
    from .dashboard import dashboard_bp
    from .properties import properties_bp
    from .units import units_bp
    from .maintenance import maintenance_bp
    from .managers import managers_bp
    from .messages import messages_bp
    from .notifications import notifications_bp
    from .tenants import tenants_bp

    app.register_blueprint(dashboard_bp)
    app.register_blueprint(properties_bp)
    app.register_blueprint(units_bp)
    app.register_blueprint(tenants_bp)
    app.register_blueprint(maintenance_bp)
    app.register_blueprint(managers_bp)
    app.register_blueprint(messages_bp)
    app.register_blueprint(notifications_bp)


def register_error_handlers(app):
    @app.errorhandler(HTTPException)
    def http_error(exc):
        return jsonify({'error': exc.description}), exc.code

    @app.errorhandler(DanglingReferenceError)
    def broken_snapshot(exc):
        logger.exception("snapshot failed integrity check")
        return jsonify({'error': 'Data integrity error', 'detail': str(exc)}), 500

    @app.errorhandler(NoLandlordSelectedError)
    def no_landlord(exc):
        return jsonify({'error': str(exc), 'redirect': exc.redirect_to}), 409

    @app.errorhandler(InvalidPageRequestError)
    @app.errorhandler(InvalidTransitionError)
    @app.errorhandler(OutsidePortfolioError)
    def bad_request(exc):
        return jsonify({'error': str(exc)}), 400

    @app.errorhandler(DuplicateEntityError)
    @app.errorhandler(StaleMutationError)
    def conflict(exc):
        return jsonify({'error': str(exc)}), 409
