import logging

import click
from flask import Flask, jsonify
from flask_cors import CORS
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException, NotFound

from auth import auth_bp
from config import Config
from database import db, User
from route import users_bp, donor_profiles_bp, blood_requests_bp, donor_pledges_bp, donations_bp

logger = logging.getLogger(__name__)


def create_app(config_class=Config):
    """Flask application factory"""
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    CORS(app, resources={r"/api/*": {"origins": app.config['CORS_ORIGINS']}})
    db.init_app(app)

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(users_bp, url_prefix='/api/Users')
    app.register_blueprint(donor_profiles_bp, url_prefix='/api/Donor_Profiles')
    app.register_blueprint(blood_requests_bp, url_prefix='/api/Blood_Requests')
    app.register_blueprint(donor_pledges_bp, url_prefix='/api/Donor_Pledges')
    app.register_blueprint(donations_bp, url_prefix='/api/Donations')

    register_error_handlers(app)
    register_commands(app)

    @app.route('/api/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        try:
            db.session.execute(text('SELECT 1'))
        except SQLAlchemyError as e:
            logger.error(f"Health check failed: {e}")
            return jsonify({'status': 'unhealthy', 'database': 'disconnected'}), 500
        return jsonify({'status': 'healthy', 'database': 'connected'})

    with app.app_context():
        db.create_all()

    return app


# ------------------------- #
# Error handlers
# ------------------------- #
def register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(error):
        # routes raise NotFound with their own message; the default one means no route matched
        if error.description == NotFound.description:
            return jsonify({'error': 'Endpoint not found'}), 404
        return jsonify({'error': error.description}), 404

    @app.errorhandler(HTTPException)
    def http_error(error):
        return jsonify({'error': error.description}), error.code

    @app.errorhandler(SQLAlchemyError)
    def database_error(error):
        db.session.rollback()
        logger.exception("Database error")
        return jsonify({'error': 'Database error occurred'}), 500

    @app.errorhandler(500)
    def internal_error(error):
        return jsonify({'error': 'Internal server error'}), 500


# ------------------------- #
# CLI
# ------------------------- #
def register_commands(app):
    @app.cli.command('init-db')
    def init_db():
        """Create all database tables."""
        db.create_all()
        click.echo('Database initialized')

    @app.cli.command('list-users')
    def list_users():
        """Print every registered user."""
        for user in User.query.order_by(User.user_id).all():
            click.echo(f"{user.user_id}\t{user.full_name}\t{user.email}")


if __name__ == '__main__':
    app = create_app()
    logger.info("Starting blood donation API")
    app.run(debug=app.config['DEBUG'], host='0.0.0.0', port=app.config['PORT'])
