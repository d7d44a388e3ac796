"""Application factory for Link Realty."""
from __future__ import annotations

from flask import Flask

from .config import Config
from .extensions import db
from .logging_service import log_manager


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__, static_folder="static", template_folder="templates")
    app.config.from_object(config_class)

    db.init_app(app)
    log_manager.init_app(app)

    with app.app_context():
        db.create_all()

    from .tokens import services as token_services
    from .report import providers as report_providers

    token_services.init_app(app)
    report_providers.init_app(app)
    app.extensions["token_observers"].append(log_manager.token_observer())

    from .index import bp as index_bp
    from .search import bp as search_bp
    from .report import bp as report_bp
    from .tokens import bp as tokens_bp
    from .logging import bp as logging_bp

    app.register_blueprint(index_bp)
    app.register_blueprint(search_bp, url_prefix="/search")
    app.register_blueprint(report_bp, url_prefix="/report")
    app.register_blueprint(tokens_bp, url_prefix="/tokens")
    app.register_blueprint(logging_bp, url_prefix="/logs")

    for component in ("Home", "Search", "Report", "Tokens"):
        log_manager.register_component(component)

    @app.context_processor
    def inject_globals() -> dict[str, object]:
        """Inject the header state shared by every page."""
        from .index.services import get_gate

        gate = get_gate()
        context: dict[str, object] = {
            "environment": app.config.get("ENVIRONMENT", "development"),
            "is_authenticated": gate.is_authenticated(),
            "token_balance": None,
            "token_tier": None,
        }
        if context["is_authenticated"]:
            balance = token_services.get_ledger().get_balance()
            context["token_balance"] = balance
            context["token_tier"] = token_services.balance_tier(balance)
        return context

    return app
