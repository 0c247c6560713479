import logging

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from .config import Config

# Initialize SQLAlchemy outside the create_app function
db = SQLAlchemy()


def create_app(config_class=Config):
    # 1. Application Setup
    app = Flask(__name__)
    # Load configuration from the specified class (defaulting to Config)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    logging.getLogger('dwella').setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # 2. Database Initialization
    db.init_app(app)

    # 3. Register Blueprints (Routes) and JSON error handlers
    from .routes import register_blueprints, register_error_handlers
    register_blueprints(app)
    register_error_handlers(app)

    # Per-user notification state machines, bounded and shared across requests
    from .services.notifications import SessionRegistry
    app.extensions['dwella.notifications'] = SessionRegistry()

    # 4. Import Models (Required to create the database tables)
    from . import models  # noqa: F401
    from .seed import register_commands, seed_demo_data
    register_commands(app)

    # 5. Database Table Creation (Inside application context)
    with app.app_context():
        db.create_all()
        if app.config.get('SEED_DEMO_DATA'):
            seed_demo_data()

    return app
