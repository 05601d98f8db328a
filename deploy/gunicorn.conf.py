"""Gunicorn configuration for production deployment.

Run with:
    gunicorn webapp.api:app -c deploy/gunicorn.conf.py
"""

import multiprocessing
import os

# Server socket
bind = os.getenv("BIND", "0.0.0.0:8000")
backlog = 2048

# Worker processes
workers = int(os.getenv("WEB_CONCURRENCY", multiprocessing.cpu_count() * 2 + 1))
worker_class = "uvicorn.workers.UvicornWorker"
worker_connections = 1000
max_requests = 1000
max_requests_jitter = 50
timeout = 30
keepalive = 5

# Process naming
proc_name = "storefront"

# Server mechanics
daemon = False
tmp_upload_dir = None

# Logging: access and error logs as JSON on stdout, next to the app's own JSON logs
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
access_log_format = '%(h)s "%(r)s" %(s)s %(b)s %(D)s "%({x-correlation-id}o)s"'

logconfig_dict = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        "gunicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
        "gunicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
    },
    "root": {
        "level": "INFO",
        "handlers": ["console"],
    },
}

# Graceful shutdown
graceful_timeout = 30

# Each worker opens its own database and Redis connections in the app lifespan
preload_app = False


def when_ready(server):
    """Called just after the server is started."""
    server.log.info(f"Storefront ready on {bind} with {workers} workers")


def post_fork(server, worker):
    server.log.info(f"Worker spawned (pid: {worker.pid})")


def worker_abort(worker):
    """Called when a worker times out."""
    worker.log.warning(f"Worker {worker.pid} aborted (timeout)")
