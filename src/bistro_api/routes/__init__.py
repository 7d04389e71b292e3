"""
API blueprints.

Every resource lives in its own sub-blueprint; all of them are mounted under
``/api`` by the app factory.
"""

from flask import Blueprint

api_bp = Blueprint("api", __name__)

from .auth import auth_bp
from .health import health_bp
from .menu import menu_bp
from .orders import orders_bp
from .realtime import realtime_bp
from .reports import reports_bp
from .tables import tables_bp
from .users import users_bp

api_bp.register_blueprint(auth_bp)
api_bp.register_blueprint(menu_bp)
api_bp.register_blueprint(orders_bp)
api_bp.register_blueprint(tables_bp)
api_bp.register_blueprint(reports_bp)
api_bp.register_blueprint(users_bp)
api_bp.register_blueprint(realtime_bp)
api_bp.register_blueprint(health_bp)

__all__ = ["api_bp"]
