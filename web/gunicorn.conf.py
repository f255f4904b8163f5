"""
Gunicorn configuration for the document search service

The document store lives in process memory, so the service runs a single
worker process and serves concurrent requests with threads. Every request
then sees the same collection.

Usage:
    gunicorn -c web/gunicorn.conf.py "web.app:create_app()"
"""

import os

# =============================================================================
# Server Socket
# =============================================================================

bind = os.getenv('GUNICORN_BIND', '0.0.0.0:5001')

backlog = 2048

# =============================================================================
# Workers
# =============================================================================

# One process owns the in-memory store
workers = 1

worker_class = 'gthread'

threads = int(os.getenv('GUNICORN_THREADS', 8))

# =============================================================================
# Timeouts
# =============================================================================

timeout = int(os.getenv('GUNICORN_TIMEOUT', 120))

graceful_timeout = int(os.getenv('GUNICORN_GRACEFUL_TIMEOUT', 30))

keepalive = int(os.getenv('GUNICORN_KEEPALIVE', 5))

# =============================================================================
# Process Naming
# =============================================================================

proc_name = 'docsearch'

# =============================================================================
# Logging
# =============================================================================

accesslog = os.getenv('GUNICORN_ACCESS_LOG', '-')  # '-' = stdout

errorlog = os.getenv('GUNICORN_ERROR_LOG', '-')  # '-' = stderr

loglevel = os.getenv('GUNICORN_LOG_LEVEL', 'info')

access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

capture_output = True

# =============================================================================
# Security
# =============================================================================

limit_request_line = 4094

limit_request_fields = 100

limit_request_field_size = 8190

# =============================================================================
# Hooks
# =============================================================================

def on_starting(server):
    """Called just before the master process is initialized."""
    print(f"[docsearch] Starting Gunicorn with {threads} threads (single worker, in-memory store)")


def post_fork(server, worker):
    """Called just after a worker has been forked."""
    print(f"[docsearch] Worker {worker.pid} spawned")


def worker_exit(server, worker):
    """Called just after a worker has been exited."""
    print(f"[docsearch] Worker {worker.pid} exited; in-memory documents discarded")


def on_exit(server):
    """Called just before exiting Gunicorn."""
    print("[docsearch] Gunicorn shutting down")
