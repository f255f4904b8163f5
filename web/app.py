#!/usr/bin/env python3
"""
Document Search Web Server

Features:
- Upload extracted text or plain text files
- Hybrid semantic + keyword search with concept expansion
- Term statistics, health probes and metrics

Usage:
    python -m web.app --port 5001
    gunicorn -c web/gunicorn.conf.py "web.app:create_app()"
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask
from flask_cors import CORS

from core.metrics import MetricsCollector
from search.config import SearchConfig, load_search_config
from search.pipeline import SearchPipeline

from .api import api
from .error_handlers import setup_error_handlers
from .health import health_bp
from .logging_config import get_logger, setup_logging, setup_request_logging

# Load environment variables
load_dotenv(Path(__file__).parent.parent / '.env')

logger = get_logger('docsearch.app')


def _load_config():
    """SearchConfig from DOCSEARCH_CONFIG, or defaults."""
    config_path = os.getenv('DOCSEARCH_CONFIG')
    if config_path:
        return load_search_config(config_path)
    return SearchConfig()


def create_app(config=None, pipeline=None, metrics=None):
    """
    Create the Flask application.

    Args:
        config: SearchConfig (loaded from DOCSEARCH_CONFIG if None)
        pipeline: SearchPipeline to serve (a new empty one if None)
        metrics: MetricsCollector (a new one if None)
    """
    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = int(os.getenv('MAX_UPLOAD_MB', 50)) * 1024 * 1024

    CORS(app)

    is_production = os.getenv('FLASK_ENV', 'production') == 'production'
    setup_logging(app, level=os.getenv('LOG_LEVEL', 'INFO'), json_format=is_production)
    setup_request_logging(app)
    setup_error_handlers(app)

    if pipeline is None:
        pipeline = SearchPipeline(config or _load_config())

    slow_ms = float(os.getenv('SLOW_SEARCH_MS', 1000))
    app.extensions['docsearch_pipeline'] = pipeline
    app.extensions['docsearch_metrics'] = metrics or MetricsCollector(slow_search_threshold_ms=slow_ms)

    app.register_blueprint(health_bp)
    app.register_blueprint(api, url_prefix='/api')

    logger.info('Application created', extra={
        'documents': len(pipeline.store),
        'dimension': pipeline.config.dimension,
    })
    return app


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(description="Document search web server")
    parser.add_argument('--host', default=os.getenv('HOST', '127.0.0.1'), help="Bind address")
    parser.add_argument('--port', '-p', type=int, default=int(os.getenv('PORT', 5001)), help="Port")
    parser.add_argument('--debug', action='store_true', help="Enable Flask debug mode")

    args = parser.parse_args()

    app = create_app()

    print("=" * 60)
    print("  Document Search Server")
    print("=" * 60)
    print(f"  Starting server on http://{args.host}:{args.port}")
    print("=" * 60)

    app.run(host=args.host, port=args.port, debug=args.debug)
