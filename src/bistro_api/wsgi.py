"""
WSGI entry point (``bistro_api.wsgi:app``).
"""

from bistro_api.app import create_app

app = create_app()
