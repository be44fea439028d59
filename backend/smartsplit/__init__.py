from flask import Flask
from flask_cors import CORS
from flask_jwt_extended import JWTManager

from smartsplit.config import Config
from smartsplit.extensions import init_mongo

jwt = JWTManager()

def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Disable strict slashes to prevent 308 redirects that break CORS preflight
    app.url_map.strict_slashes = False

    # Allow the web client to talk to Flask
    CORS(
        app,
        supports_credentials=True,
        resources={r"/*": {"origins": app.config["CORS_ORIGINS"]}}
    )
    # Init extensions
    init_mongo(app)
    jwt.init_app(app)

    # Register blueprints
    from smartsplit.auth.routes import auth_bp
    from smartsplit.users.routes import users_bp
    from smartsplit.groups.routes import groups_bp
    from smartsplit.expenses.routes import expenses_bp
    from smartsplit.reports.routes import reports_bp

    app.register_blueprint(auth_bp, url_prefix='/api/v1/auth')
    app.register_blueprint(users_bp, url_prefix='/api/v1/users')
    app.register_blueprint(groups_bp, url_prefix='/api/v1/groups')
    app.register_blueprint(expenses_bp, url_prefix='/api/v1/expenses')
    app.register_blueprint(reports_bp, url_prefix='/api/v1/reports')

    return app
