import logging

from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from models import storage
from models.session_store import SessionStore
from services.accounts import AccountService
from services.session import SessionService
from utils.assets import uploader_from_config
from utils.tokens import TokenIssuer, TokenSettings, TokenValidator

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0.0",
    "info": {
        "title": "Blog API",
        "version": "1.0.0",
        "description": "Accounts and JWT sessions for the blogging platform.",
    },
    "basePath": "/",  # Blueprints are mounted under /api/v1
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def create_app(config_name: str | None = None, overrides: dict | None = None,
               uploader=None, clock=None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    Token settings are built here exactly once and passed into the issuer and
    validator; tests inject a fake uploader and clock through the arguments.
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Cross-Origin Resource Sharing; credentialed (cookie) requests only for an explicit origin list
    origins = app.config.get("CORS_ORIGINS", "*")
    CORS(
        app,
        resources={r"/*": {"origins": origins if origins == "*" else origins.split(",")}},
        supports_credentials=origins != "*",
    )

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    register_error_handlers(app)

    # Raises ConfigurationError on missing secrets; the app must not start without them
    settings = TokenSettings.from_mapping(app.config, clock=clock)

    storage.configure(app.config["DATABASE_URL"])
    app.extensions["token_settings"] = settings
    app.extensions["session_service"] = SessionService(
        storage,
        TokenIssuer(settings),
        TokenValidator(settings),
        SessionStore(storage),
    )
    app.extensions["account_service"] = AccountService(
        storage, uploader or uploader_from_config(app.config)
    )

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1/users")
    app.register_blueprint(users_bp, url_prefix="/api/v1/users")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to the Blog API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    return app
