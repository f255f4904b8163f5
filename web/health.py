"""
Health Check System for the document search service

Endpoints:
- /health - liveness probe (is the process alive?)
- /ready - readiness probe (can it serve traffic?)
- /health/detailed - Full diagnostic report
- /metrics - Counters, latencies and process resources
"""

import sys
import time

import psutil
from flask import Blueprint, current_app, jsonify

health_bp = Blueprint('health', __name__)

# Track startup time
STARTUP_TIME = time.time()

VERSION = '1.0.0'


def check_store():
    """Check that the in-memory document store answers."""
    try:
        pipeline = current_app.extensions['docsearch_pipeline']
        stats = pipeline.store.statistics()
        return {
            'status': 'ok',
            'documents': len(pipeline.store),
            'vocabulary_size': stats['vocabulary_size'],
        }
    except KeyError:
        return {'status': 'error', 'error': 'Search pipeline not initialized'}


def check_encoder():
    """Encode a probe text to verify the vectorization path."""
    try:
        pipeline = current_app.extensions['docsearch_pipeline']
        vector = pipeline.encoder.embed('health check probe')
        return {'status': 'ok', 'dimension': int(vector.shape[0])}
    except KeyError:
        return {'status': 'error', 'error': 'Search pipeline not initialized'}


def check_dependencies():
    """Check if required dependencies are available."""
    deps = {}

    for module in ['flask', 'flask_cors', 'numpy', 'yaml', 'dotenv', 'psutil', 'search']:
        try:
            __import__(module)
            deps[module] = {'status': 'ok'}
        except ImportError:
            deps[module] = {'status': 'missing'}

    return deps


def get_system_resources():
    """Get current system resource usage."""
    try:
        process = psutil.Process()

        return {
            'memory': {
                'rss_mb': round(process.memory_info().rss / 1024 / 1024, 2),
                'percent': round(process.memory_percent(), 2)
            },
            'cpu': {
                'percent': round(process.cpu_percent(interval=0.1), 2),
                'num_threads': process.num_threads()
            },
            'system': {
                'memory_available_mb': round(psutil.virtual_memory().available / 1024 / 1024, 2),
            }
        }
    except psutil.Error as e:
        return {'status': 'error', 'error': str(e)}


# =============================================================================
# Health Endpoints
# =============================================================================

@health_bp.route('/health')
def liveness():
    """
    Liveness probe.

    Returns 200 if the process is alive and can respond.
    """
    return jsonify({
        'status': 'ok',
        'uptime_seconds': int(time.time() - STARTUP_TIME)
    })


@health_bp.route('/ready')
def readiness():
    """
    Readiness probe.

    Ready once the pipeline is attached and the encoder works. An empty
    collection is still ready.
    """
    store_check = check_store()
    encoder_check = check_encoder()

    is_ready = store_check['status'] == 'ok' and encoder_check['status'] == 'ok'

    response = {
        'status': 'ready' if is_ready else 'not_ready',
        'checks': {
            'store': store_check['status'],
            'encoder': encoder_check['status'],
        }
    }

    return jsonify(response), 200 if is_ready else 503


@health_bp.route('/health/detailed')
def detailed_health():
    """
    Detailed health check for diagnostics.
    """
    return jsonify({
        'status': 'ok',
        'version': VERSION,
        'uptime_seconds': int(time.time() - STARTUP_TIME),
        'python_version': sys.version,
        'checks': {
            'store': check_store(),
            'encoder': check_encoder(),
            'dependencies': check_dependencies()
        },
        'resources': get_system_resources()
    })


@health_bp.route('/metrics')
def metrics():
    """
    Metrics endpoint for monitoring.
    """
    store_check = check_store()
    resources = get_system_resources()
    collector = current_app.extensions['docsearch_metrics']

    return jsonify({
        'docsearch_uptime_seconds': int(time.time() - STARTUP_TIME),
        'docsearch_documents_total': store_check.get('documents', 0),
        'docsearch_vocabulary_size': store_check.get('vocabulary_size', 0),
        'process_memory_mb': resources.get('memory', {}).get('rss_mb', 0),
        'process_cpu_percent': resources.get('cpu', {}).get('percent', 0),
        'collector': collector.get_summary(),
        'alerts': collector.get_alerts(),
    })
