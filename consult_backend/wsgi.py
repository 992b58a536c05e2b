"""
wsgi.py — WSGI entry point.

  flask --app consult_backend.wsgi run
  gunicorn consult_backend.wsgi:app

FLASK_ENV selects the config class (development / testing / production).
"""

import os

from consult_backend.app import create_app

app = create_app(os.getenv("FLASK_ENV", "development"))
