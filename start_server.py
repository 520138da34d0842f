"""Production server startup script for the notification hub.

Entry point for running the API under Gunicorn in containers.
"""

import os
import sys

from gunicorn.app.wsgiapp import run


def main():
    """Start the notification hub using Gunicorn.

    Worker and thread counts come from GUNICORN_WORKERS and GUNICORN_THREADS.
    Access and error logs go to stdout/stderr for container log aggregation.
    """
    sys.argv = [
        "gunicorn",
        "notification_hub.wsgi:application",
        "--bind",
        os.getenv("GUNICORN_BIND", "0.0.0.0:8000"),
        "--workers",
        os.getenv("GUNICORN_WORKERS", "4"),
        "--threads",
        os.getenv("GUNICORN_THREADS", "2"),
        "--timeout",
        "60",
        "--access-logfile",
        "-",
        "--error-logfile",
        "-",
    ]
    run()


if __name__ == "__main__":
    main()
