"""Current sprint API endpoints."""

import logging

from flask import Blueprint, current_app, request, jsonify
import requests

from services.current_sprint import CurrentSprintService

bp = Blueprint("current_sprint", __name__, url_prefix="/api/current-sprint")

logger = logging.getLogger(__name__)

TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off")


def get_jira_credentials():
    """Extract Jira credentials from request headers."""
    server = request.headers.get("X-Jira-Server", "").rstrip("/")
    email = request.headers.get("X-Jira-Email")
    token = request.headers.get("X-Jira-Token")

    if not all([server, email, token]):
        return None, None, None

    return server, email, token


def get_bool_arg(name, default):
    """Parse a boolean query param; raises ValueError on junk."""
    value = request.args.get(name)
    if value is None or value == "":
        return default
    value = value.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {name}: {value}")


def build_service(server, email, token):
    """Create a CurrentSprintService using the app's current sprint config."""
    settings = current_app.config["CURRENT_SPRINT"]
    return CurrentSprintService(
        server, email, token,
        story_points_field_id=settings["storyPointsFieldId"],
        split_rules=settings["splitRules"],
    )


@bp.route("/<int:board_id>", methods=["GET"])
def get_current_sprint(board_id):
    """Get the current-sprint payload for a board.

    Query params:
        - sprint_id: Optional sprint to show instead of the active one
        - recent_closed_within_days: Fallback window when no sprint is active
        - use_recent_closed: "false" disables the recently-closed fallback

    Returns:
        - Resolved sprint, summary and day metadata
        - Actual and ideal burndown series
        - Scope changes, stories list, subtask tracking, stuck candidates
        - Previous, recent and next sprints
    """
    server, email, token = get_jira_credentials()

    if not server:
        return jsonify({"error": "Missing Jira credentials in headers"}), 401

    settings = current_app.config["CURRENT_SPRINT"]

    try:
        sprint_id = request.args.get("sprint_id", type=int)
        within_days = request.args.get("recent_closed_within_days", type=int)
        use_recent_closed = get_bool_arg("use_recent_closed", settings["useRecentClosedIfNoActive"])
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    if request.args.get("sprint_id") and sprint_id is None:
        return jsonify({"error": "sprint_id must be an integer"}), 400
    if request.args.get("recent_closed_within_days") and within_days is None:
        return jsonify({"error": "recent_closed_within_days must be an integer"}), 400

    try:
        service = build_service(server, email, token)
        payload = service.get_current_sprint(
            board_id,
            sprint_id=sprint_id,
            use_recent_closed_if_no_active=use_recent_closed,
            recent_closed_within_days=(
                within_days if within_days is not None else settings["recentClosedWithinDays"]
            ),
            recent_limit=settings["recentSprintsLimit"],
        )
        return jsonify({"data": payload})
    except requests.exceptions.RequestException as e:
        logger.exception("Jira request failed for board %s", board_id)
        return jsonify({"error": f"Failed to fetch data from Jira: {str(e)}"}), 502
    except Exception as e:
        logger.exception("Error generating current-sprint payload for board %s", board_id)
        return jsonify({"error": str(e)}), 500
