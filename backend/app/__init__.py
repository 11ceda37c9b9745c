"""Flask application factory."""

import json
import logging
import os
from flask import Flask
from flask_cors import CORS

from services.issue_classification import build_split_rules
from services.sprint_analytics import (
    DEFAULT_RECENT_CLOSED_WITHIN_DAYS,
    DEFAULT_RECENT_SPRINTS_LIMIT,
)

CONFIG_PATH = os.path.join(
    os.path.dirname(__file__), "..", "config", "current-sprint-config.json"
)

LOG_FORMAT = "[%(asctime)s] %(levelname)-5s %(name)s: %(message)s"


def default_current_sprint_config():
    """Defaults used when no config file is present."""
    return {
        "storyPointsFieldId": None,
        "useRecentClosedIfNoActive": True,
        "recentClosedWithinDays": DEFAULT_RECENT_CLOSED_WITHIN_DAYS,
        "recentSprintsLimit": DEFAULT_RECENT_SPRINTS_LIMIT,
        "splitRules": build_split_rules(None),
    }


def load_current_sprint_config(app, config_path=None):
    """Load current-sprint settings from the JSON config file, if any."""
    config_path = config_path or CONFIG_PATH
    settings = default_current_sprint_config()

    if os.path.exists(config_path):
        try:
            with open(config_path, "r") as f:
                config = json.load(f)
            for key in ("storyPointsFieldId", "useRecentClosedIfNoActive",
                        "recentClosedWithinDays", "recentSprintsLimit"):
                if config.get(key) is not None:
                    settings[key] = config[key]
            settings["splitRules"] = build_split_rules(config.get("issueTypeSplit"))
            app.logger.info(f"Loaded current sprint config from {config_path}")
        except (json.JSONDecodeError, IOError) as e:
            app.logger.warning(f"Failed to load current sprint config: {e}")
    else:
        app.logger.info("No current-sprint-config.json found, using defaults")

    app.config["CURRENT_SPRINT"] = settings
    return settings


def configure_logging():
    """Configure root logging from the LOG_LEVEL environment variable."""
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


def create_app(config_path=None):
    """Create and configure the Flask application."""
    configure_logging()
    app = Flask(__name__)

    # Enable CORS for frontend
    CORS(app, resources={
        r"/api/*": {
            "origins": ["http://localhost:5173", "http://127.0.0.1:5173"],
            "methods": ["GET", "OPTIONS"],
            "allow_headers": [
                "Content-Type",
                "X-Jira-Token", "X-Jira-Email", "X-Jira-Server"
            ]
        }
    })

    # Register blueprints
    from app.api import boards, current_sprint
    app.register_blueprint(boards.bp)
    app.register_blueprint(current_sprint.bp)

    load_current_sprint_config(app, config_path)

    # Health check endpoint
    @app.route("/health")
    def health():
        return {"status": "ok"}

    return app
