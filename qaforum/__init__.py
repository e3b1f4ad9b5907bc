__version__ = '1.0.0'

import logging
from datetime import datetime, timezone

from flask import Flask, jsonify
from flask_cors import CORS

from qaforum.answers import answers_bp
from qaforum.config import Config
from qaforum.db import Database
from qaforum.docs import init_docs
from qaforum.errors import register_error_handlers
from qaforum.json import ApiJSONProvider
from qaforum.questions import questions_bp


def configure_logging(level):
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )


def create_app(config=None, database=None):
    """
    Application factory

    Logic:
    1. Load Config, then apply the optional override mapping
    2. Configure logging and CORS
    3. Register the Database extension (a ready instance may be injected)
    4. Register blueprints, error handlers and the service endpoints
    """
    app = Flask(__name__)
    app.json = ApiJSONProvider(app)

    app.config.from_object(Config)
    if config:
        app.config.update(config)

    configure_logging(app.config['LOG_LEVEL'])

    origins = app.config['CORS_ORIGINS']
    CORS(app, origins='*' if origins == '*' else [o.strip() for o in origins.split(',')])

    if database is None:
        database = Database()
    database.init_app(app)

    app.register_blueprint(questions_bp)
    app.register_blueprint(answers_bp)
    init_docs(app)
    register_error_handlers(app)

    @app.route('/test', methods=['GET'])
    def test():
        return jsonify('Server API is working 🚀')

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        return jsonify({
            'status': 'healthy',
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'service': 'Q&A Forum API'
        }), 200

    return app
