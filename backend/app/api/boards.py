"""Board sprint navigation API endpoints."""

import logging

from flask import Blueprint, current_app, request, jsonify
import requests

from services.current_sprint import CurrentSprintService
from services.sprint_analytics import (
    resolve_next_sprint,
    resolve_recent_sprints,
    resolve_sprint_from_list,
)

bp = Blueprint("boards", __name__, url_prefix="/api/boards")

logger = logging.getLogger(__name__)


def get_jira_credentials():
    """Extract Jira credentials from request headers."""
    server = request.headers.get("X-Jira-Server", "").rstrip("/")
    email = request.headers.get("X-Jira-Email")
    token = request.headers.get("X-Jira-Token")

    if not all([server, email, token]):
        return None, None, None

    return server, email, token


@bp.route("/<int:board_id>/sprints", methods=["GET"])
def get_sprints(board_id):
    """Get sprint tabs for a board: current, recent and next sprint.

    Query params:
        - limit: Number of recent sprints to return (default from config, 6)
        - sprint_id: Optional sprint to treat as current
    """
    server, email, token = get_jira_credentials()

    if not server:
        return jsonify({"error": "Missing Jira credentials in headers"}), 401

    settings = current_app.config["CURRENT_SPRINT"]
    limit = request.args.get("limit", type=int)
    sprint_id = request.args.get("sprint_id", type=int)

    if request.args.get("sprint_id") and sprint_id is None:
        return jsonify({"error": "sprint_id must be an integer"}), 400
    if request.args.get("limit") and limit is None:
        return jsonify({"error": "limit must be a positive integer"}), 400
    if limit is None:
        limit = settings["recentSprintsLimit"]
    if limit < 1:
        return jsonify({"error": "limit must be a positive integer"}), 400

    try:
        service = CurrentSprintService(server, email, token)
        sprints = service.get_sprints(board_id)
    except requests.exceptions.HTTPError as e:
        if e.response is not None and e.response.status_code == 404:
            return jsonify({"error": "Board not found"}), 404
        logger.exception("Jira error listing sprints for board %s", board_id)
        return jsonify({"error": f"Jira API error: {str(e)}"}), 502
    except requests.exceptions.RequestException as e:
        logger.exception("Failed to connect to Jira for board %s", board_id)
        return jsonify({"error": f"Failed to connect to Jira: {str(e)}"}), 502

    current = resolve_sprint_from_list(
        sprints,
        sprint_id=sprint_id,
        use_recent_closed_if_no_active=settings["useRecentClosedIfNoActive"],
        recent_closed_within_days=settings["recentClosedWithinDays"],
    )

    formatted_current = None
    if current:
        formatted_current = {
            "id": current.get("id"),
            "name": current.get("name") or "",
            "state": current.get("state") or "",
            "startDate": current.get("startDate") or "",
            "endDate": current.get("endDate") or "",
            "goal": current.get("goal") or "",
        }

    return jsonify({
        "data": {
            "current": formatted_current,
            "recent": resolve_recent_sprints(sprints, current, limit),
            "next": resolve_next_sprint(sprints, current),
        }
    })
