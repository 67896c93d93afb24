"""
Flask route blueprints for QuoteDesk.

All routes answer JSON:
- system: health, settings, company info, backup/restore
- catalog: products and services
- clients: client registry
- quotes: current draft, commit, saved quote history

Each blueprint is registered with the Flask app in create_app().
"""

from .system import system_bp
from .catalog import catalog_bp
from .clients import clients_bp
from .quotes import quotes_bp

__all__ = [
    "system_bp",
    "catalog_bp",
    "clients_bp",
    "quotes_bp",
]


def register_blueprints(app):
    """
    Register all blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(system_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(clients_bp)
    app.register_blueprint(quotes_bp)
