# Import important modules and create app package
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()

def create_app(config_class=None):
    # Config is imported late so load_dotenv() has run before it reads os.environ
    from gymflow.config import Config

    # Initialize app
    app = Flask(__name__)
    app.config.from_object(config_class or Config)

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)

    # Register blueprints
    from gymflow.main.routes import main_bp
    from gymflow.admin.routes import admin_bp
    from gymflow.appointments.routes import appointments_bp
    from gymflow.billing.routes import billing_bp
    from gymflow.reports.routes import reports_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(appointments_bp)
    app.register_blueprint(billing_bp)
    app.register_blueprint(reports_bp)

    register_error_handlers(app)

    from gymflow.cli import register_cli
    register_cli(app)

    # Create database tables
    with app.app_context():
        import gymflow.models  # noqa: F401  (registers tables on db.metadata)
        db.create_all()
        app.logger.info("Database tables ready (%s)", app.config['SQLALCHEMY_DATABASE_URI'])

    return app

def register_error_handlers(app):
    """Return JSON bodies instead of HTML error pages"""
    @app.errorhandler(400)
    def bad_request(error):
        return jsonify(error=getattr(error, 'description', 'Bad request')), 400

    @app.errorhandler(404)
    def not_found(error):
        return jsonify(error='Not found'), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify(error='Method not allowed'), 405
