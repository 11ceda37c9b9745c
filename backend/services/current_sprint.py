"""Current sprint view-model service.

Fetches a board's sprints and the resolved sprint's issues from Jira and
builds the payload the current-sprint dashboard renders.
"""

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Optional

import requests

from services.issue_classification import (
    DEFAULT_SPLIT_RULES,
    classify_scope_change,
    get_story_points,
    is_story_issue,
    is_subtask_issue,
    is_work_item_issue,
)
from services.sprint_analytics import (
    DEFAULT_RECENT_CLOSED_WITHIN_DAYS,
    DEFAULT_RECENT_SPRINTS_LIMIT,
    compute_ideal_burndown,
    compute_sprint_summary,
    parse_date,
    resolve_next_sprint,
    resolve_recent_sprints,
    resolve_sprint_from_list,
    round_half_up,
    to_date_only,
    to_timestamp,
    utc_now,
)

logger = logging.getLogger(__name__)

DEFAULT_ASSUMPTIONS = [
    "Completion anchored to: resolution date.",
    "Observed window from story created/resolution only.",
    "Scope added = created after sprint start (no changelog).",
    "Burndown assumes linear scope; scope changes shown separately.",
]

STUCK_THRESHOLD_HOURS = 24

ISSUE_FIELDS = [
    "summary", "issuetype", "status", "resolution", "created", "resolutiondate",
    "updated", "statuscategorychangedate", "parent", "assignee", "reporter",
    "timetracking", "timeoriginalestimate", "timespent", "timeestimate",
]


def _hours(seconds) -> float:
    if seconds is None:
        return 0.0
    try:
        seconds = float(seconds)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(seconds):
        return 0.0
    return round_half_up(seconds / 3600, 1)


def _status_category(issue: dict) -> str:
    status = issue.get("fields", {}).get("status") or {}
    return (status.get("statusCategory") or {}).get("key", "")


def _display_name(user) -> str:
    return (user or {}).get("displayName", "") or ""


class CurrentSprintService:
    """Service for building the current-sprint payload from Jira data."""

    def __init__(self, server: str, email: str, token: str,
                 story_points_field_id: Optional[str] = None,
                 split_rules=None):
        self.server = server.rstrip("/")
        self.email = email
        self.token = token
        self.split_rules = split_rules or DEFAULT_SPLIT_RULES
        self._story_points_field = story_points_field_id
        self._sprints_cache = {}
        self._issues_cache = {}

    def _request(self, endpoint: str, params: Optional[dict] = None):
        """Make authenticated request to Jira API."""
        response = requests.get(
            f"{self.server}{endpoint}",
            auth=(self.email, self.token),
            headers={"Accept": "application/json"},
            params=params,
            timeout=30
        )
        response.raise_for_status()
        return response.json()

    def _get_story_points_field(self) -> Optional[str]:
        """Find the story points custom field ID (configured value wins)."""
        if self._story_points_field:
            return self._story_points_field

        fields = self._request("/rest/api/3/field")
        exact = []
        candidates = []

        for field in fields:
            name = field.get("name", "")
            field_type = field.get("schema", {}).get("type")

            if field_type != "number":
                continue

            if name == "Story Points":
                exact.append(field.get("id"))
            elif "story point" in name.lower():
                candidates.append(field.get("id"))

        found = (exact + candidates) or [None]
        if found[0] is None:
            logger.warning("No story points field found on %s; points count as 0", self.server)
        self._story_points_field = found[0]
        return found[0]

    def _get_board(self, board_id: int) -> dict:
        """Fetch board id, name and project key."""
        data = self._request(f"/rest/agile/1.0/board/{board_id}")
        return {
            "id": data.get("id", board_id),
            "name": data.get("name", ""),
            "projectKeys": [k for k in [data.get("location", {}).get("projectKey")] if k],
        }

    def get_sprints(self, board_id: int) -> list:
        """Get every sprint (any state) for a board."""
        if board_id in self._sprints_cache:
            return self._sprints_cache[board_id]

        all_sprints = []
        start_at = 0
        max_results = 50

        while True:
            data = self._request(
                f"/rest/agile/1.0/board/{board_id}/sprint",
                params={"startAt": start_at, "maxResults": max_results}
            )

            sprints = data.get("values", [])
            all_sprints.extend(sprints)

            if data.get("isLast", True) or not sprints:
                break

            start_at += len(sprints)

        logger.debug("Fetched %d sprints for board %s", len(all_sprints), board_id)
        self._sprints_cache[board_id] = all_sprints
        return all_sprints

    def _get_sprint_issues(self, sprint_id: int, project_keys: Optional[list] = None) -> list:
        """Get all issues in a sprint, optionally limited to some projects."""
        if sprint_id in self._issues_cache:
            return self._issues_cache[sprint_id]

        fields = list(ISSUE_FIELDS)
        sp_field = self._get_story_points_field()
        if sp_field and sp_field not in fields:
            fields.append(sp_field)

        params = {"fields": ",".join(fields)}
        if project_keys:
            params["jql"] = "project in ({})".format(
                ", ".join(f'"{key}"' for key in project_keys)
            )

        all_issues = []
        start_at = 0
        max_results = 100

        while True:
            data = self._request(
                f"/rest/agile/1.0/sprint/{sprint_id}/issue",
                params={**params, "startAt": start_at, "maxResults": max_results}
            )

            issues = data.get("issues", [])
            all_issues.extend(issues)
            start_at += len(issues)

            # Pages may be capped below max_results; total decides when to stop
            total = data.get("total")
            if not issues or data.get("isLast"):
                break
            if total is not None:
                if start_at >= total:
                    break
            elif len(issues) < max_results:
                break

        self._issues_cache[sprint_id] = all_issues
        return all_issues

    def _issue_url(self, issue_key: str) -> str:
        if not issue_key:
            return ""
        return f"{self.server}/browse/{issue_key}"

    def _extract_time_tracking(self, issue: dict) -> dict:
        """Original estimate, time spent and remaining estimate, in seconds."""
        fields = issue.get("fields", {})
        tracking = fields.get("timetracking") or {}

        def pick(tracking_key, field_key):
            value = tracking.get(tracking_key)
            return value if value is not None else fields.get(field_key)

        return {
            "original": pick("originalEstimateSeconds", "timeoriginalestimate"),
            "spent": pick("timeSpentSeconds", "timespent"),
            "remaining": pick("remainingEstimateSeconds", "timeestimate"),
        }

    def _compute_observed_work_window(self, issues: list) -> dict:
        """Earliest created/resolved and latest resolved timestamps across issues."""
        observed_start = None
        observed_end = None

        for issue in issues:
            fields = issue.get("fields", {})
            created = to_timestamp(fields.get("created"))
            resolved = to_timestamp(fields.get("resolutiondate"))

            if created is not None:
                earliest = min(created, resolved) if resolved is not None else created
                if observed_start is None or earliest < observed_start:
                    observed_start = earliest
            if resolved is not None:
                if observed_end is None or resolved > observed_end:
                    observed_end = resolved

        def iso(ts):
            if ts is None:
                return None
            return datetime.fromtimestamp(ts, timezone.utc).isoformat()

        return {"start": iso(observed_start), "end": iso(observed_end)}

    def _compute_flags(self, observed: dict, planned_start, planned_end) -> dict:
        obs_start = to_timestamp(observed.get("start"))
        obs_end = to_timestamp(observed.get("end"))
        plan_start = to_timestamp(planned_start)
        plan_end = to_timestamp(planned_end)

        return {
            "observedBeforeSprintStart": (
                plan_start is not None and obs_start is not None and obs_start < plan_start
            ),
            "observedAfterSprintEnd": (
                plan_end is not None and obs_end is not None and obs_end > plan_end
            ),
            "sprintDatesChanged": False,
        }

    def _count_working_days(self, start_date, end_date) -> Optional[int]:
        """Count weekdays between two dates, both ends included.

        Returns None when either date is missing or unparseable and 0 when
        the end is before the start.
        """
        start = parse_date(start_date)
        end = parse_date(end_date)
        if not start or not end:
            return None
        if end < start:
            return 0

        working_days = 0
        current = start
        while current <= end:
            if current.weekday() < 5:  # Monday = 0, Friday = 4
                working_days += 1
            current += timedelta(days=1)

        return working_days

    def _compute_days_meta(self, sprint: dict, now=None) -> dict:
        """Calendar/working days of the sprint and how many have elapsed."""
        start = parse_date(sprint.get("startDate"))
        end = parse_date(sprint.get("endDate"))
        meta = {
            "calendarDays": None,
            "workingDays": None,
            "daysElapsedCalendar": None,
            "daysRemainingCalendar": None,
            "daysElapsedWorking": None,
            "daysRemainingWorking": None,
        }
        if not start or not end:
            return meta

        now = utc_now(now)
        day_seconds = 24 * 60 * 60
        calendar_days = math.ceil((end - start).total_seconds() / day_seconds)
        working_days = self._count_working_days(start, end)
        meta["calendarDays"] = calendar_days
        meta["workingDays"] = working_days

        if start <= now <= end:
            meta["daysElapsedCalendar"] = math.ceil((now - start).total_seconds() / day_seconds)
            meta["daysRemainingCalendar"] = math.ceil((end - now).total_seconds() / day_seconds)
            meta["daysElapsedWorking"] = self._count_working_days(start, now)
            meta["daysRemainingWorking"] = self._count_working_days(now, end)
        elif now > end:
            meta["daysElapsedCalendar"] = calendar_days
            meta["daysRemainingCalendar"] = 0
            meta["daysElapsedWorking"] = working_days
            meta["daysRemainingWorking"] = 0

        return meta

    def _compute_daily_completions(self, issues: list, sp_field: Optional[str]) -> dict:
        """Work items resolved per day, with their story points."""
        by_date = {}

        for issue in issues:
            if not is_work_item_issue(issue):
                continue
            day = to_date_only(issue.get("fields", {}).get("resolutiondate"))
            if not day:
                continue
            entry = by_date.setdefault(day, {"count": 0, "spCompleted": 0.0})
            entry["count"] += 1
            entry["spCompleted"] += get_story_points(issue, sp_field)

        stories = [
            {"date": day, "count": entry["count"], "spCompleted": entry["spCompleted"], "nps": None}
            for day, entry in sorted(by_date.items())
        ]
        return {"stories": stories, "subtasks": []}

    def _compute_remaining_work_by_day(self, issues: list, start_date, end_date,
                                       sp_field: Optional[str]) -> list:
        """Actual burndown: total points minus points resolved up to each day."""
        start = parse_date(start_date)
        end = parse_date(end_date)
        if not start or not end:
            return []

        total_sp = 0.0
        resolved_by_date = {}
        for issue in issues:
            points = get_story_points(issue, sp_field)
            total_sp += points
            day = to_date_only(issue.get("fields", {}).get("resolutiondate"))
            if not day:
                continue
            resolved_by_date[day] = resolved_by_date.get(day, 0.0) + points

        remaining_work = []
        cumulative = 0.0
        current = start
        while current <= end:
            day = current.date().isoformat()
            cumulative += resolved_by_date.get(day, 0.0)
            remaining_work.append({"date": day, "remainingSP": max(0.0, total_sp - cumulative)})
            current += timedelta(days=1)

        return remaining_work

    def _compute_scope_changes(self, issues: list, start_date, sp_field: Optional[str]) -> tuple:
        """Issues created after sprint start, as (scope_changes, summary_counts)."""
        sprint_start = to_timestamp(start_date)
        summary = {"bug": 0, "feature": 0, "support": 0}
        scope_changes = []

        if sprint_start is None:
            return scope_changes, summary

        for issue in issues:
            fields = issue.get("fields", {})
            created = to_timestamp(fields.get("created"))
            if created is None or created <= sprint_start:
                continue

            classification = classify_scope_change(issue)
            summary[classification] += 1

            scope_changes.append({
                "date": fields.get("created"),
                "issueKey": issue.get("key", ""),
                "summary": (fields.get("summary") or "").strip()[:200],
                "status": (fields.get("status") or {}).get("name", ""),
                "issueType": (fields.get("issuetype") or {}).get("name") or "Unknown",
                "storyPoints": get_story_points(issue, sp_field),
                "classification": classification,
                "reporter": _display_name(fields.get("reporter")),
                "assignee": _display_name(fields.get("assignee")),
                "issueUrl": self._issue_url(issue.get("key", "")),
            })

        scope_changes.sort(key=lambda change: to_timestamp(change["date"]))
        return scope_changes, summary

    def _compute_stories_list(self, issues: list, sp_field: Optional[str]) -> list:
        """One row per work item, with its own and its subtasks' logged hours."""
        subtask_hours = {}
        for issue in issues:
            if not is_subtask_issue(issue):
                continue
            parent_key = (issue.get("fields", {}).get("parent") or {}).get("key", "")
            if not parent_key:
                continue
            tracking = self._extract_time_tracking(issue)
            entry = subtask_hours.setdefault(parent_key, {"estimate": 0.0, "logged": 0.0})
            entry["estimate"] += _hours(tracking["original"])
            entry["logged"] += _hours(tracking["spent"])

        stories = []
        for issue in issues:
            if not is_work_item_issue(issue):
                continue
            fields = issue.get("fields", {})
            key = issue.get("key", "")
            tracking = self._extract_time_tracking(issue)
            subtasks = subtask_hours.get(key, {"estimate": 0.0, "logged": 0.0})

            stories.append({
                "issueKey": key,
                "summary": (fields.get("summary") or "")[:120],
                "storyPoints": get_story_points(issue, sp_field),
                "completionPct": 100 if _status_category(issue) == "done" else 0,
                "status": (fields.get("status") or {}).get("name", ""),
                "issueType": (fields.get("issuetype") or {}).get("name", ""),
                "reporter": _display_name(fields.get("reporter")),
                "assignee": _display_name(fields.get("assignee")),
                "created": fields.get("created") or "",
                "resolved": fields.get("resolutiondate") or "",
                "estimateHours": _hours(tracking["original"]),
                "loggedHours": _hours(tracking["spent"]),
                "subtaskEstimateHours": round_half_up(subtasks["estimate"], 1),
                "subtaskLoggedHours": round_half_up(subtasks["logged"], 1),
                "issueUrl": self._issue_url(key),
            })

        stories.sort(key=lambda story: story["issueKey"])
        return stories

    def _status_changed_at(self, issue: dict) -> Optional[str]:
        fields = issue.get("fields", {})
        return (fields.get("statuscategorychangedate") or fields.get("updated")
                or fields.get("created") or None)

    def _hours_since(self, value, now: datetime) -> Optional[float]:
        changed_at = parse_date(value)
        if not changed_at:
            return None
        return round_half_up((now - changed_at).total_seconds() / 3600, 1)

    def _compute_subtask_tracking(self, issues: list, now=None) -> dict:
        """Hour totals, hygiene counts and follow-up groupings for subtasks.

        notifications and notificationsByReporter list, per assignee
        and per reporter (in first-seen order), the subtask rows missing an
        estimate or missing logged time.
        """
        now = utc_now(now)
        total_estimate = 0.0
        total_logged = 0.0
        missing_estimate = 0
        missing_logged = 0
        subtasks = []
        stuck = []
        by_assignee = {}
        by_reporter = {}

        def group_for(groups, name):
            return groups.setdefault(name, {"recipient": name, "missingEstimate": [], "missingLogged": []})

        for issue in issues:
            if not is_subtask_issue(issue):
                continue
            fields = issue.get("fields", {})
            tracking = self._extract_time_tracking(issue)
            estimate = _hours(tracking["original"])
            logged = _hours(tracking["spent"])
            total_estimate += estimate
            total_logged += logged

            parent = fields.get("parent") or {}
            parent_key = parent.get("key", "") or ""
            status_changed_at = self._status_changed_at(issue)
            hours_in_status = self._hours_since(status_changed_at, now)
            row = {
                "issueKey": issue.get("key", ""),
                "summary": (fields.get("summary") or "")[:140],
                "assignee": _display_name(fields.get("assignee")) or "Unassigned",
                "reporter": _display_name(fields.get("reporter")) or "Unassigned",
                "status": (fields.get("status") or {}).get("name", ""),
                "statusCategoryKey": _status_category(issue),
                "statusChangedAt": status_changed_at,
                "hoursInStatus": hours_in_status,
                "estimateHours": estimate,
                "loggedHours": logged,
                "remainingHours": _hours(tracking["remaining"]),
                "created": fields.get("created") or "",
                "updated": fields.get("updated") or "",
                "parentKey": parent_key,
                "parentSummary": (parent.get("fields") or {}).get("summary", ""),
                "issueUrl": self._issue_url(issue.get("key", "")),
                "parentUrl": self._issue_url(parent_key),
            }
            subtasks.append(row)

            if (row["statusCategoryKey"] != "done" and hours_in_status is not None
                    and hours_in_status >= STUCK_THRESHOLD_HOURS):
                stuck.append(row)

            assignee_group = group_for(by_assignee, row["assignee"])
            reporter_group = group_for(by_reporter, row["reporter"])
            if estimate == 0:
                missing_estimate += 1
                assignee_group["missingEstimate"].append(row)
                reporter_group["missingEstimate"].append(row)
            elif logged == 0:
                missing_logged += 1
                assignee_group["missingLogged"].append(row)
                reporter_group["missingLogged"].append(row)

        return {
            "summary": {
                "totalEstimateHours": round_half_up(total_estimate, 1),
                "totalLoggedHours": round_half_up(total_logged, 1),
                "missingEstimate": missing_estimate,
                "missingLogged": missing_logged,
                "stuckOver24hCount": len(stuck),
            },
            "subtasks": subtasks,
            "stuckOver24h": stuck,
            "notifications": list(by_assignee.values()),
            "notificationsByReporter": list(by_reporter.values()),
        }

    def _compute_stuck_candidates(self, issues: list, now=None) -> list:
        """Unfinished issues whose status has not moved for a day."""
        threshold = utc_now(now) - timedelta(hours=STUCK_THRESHOLD_HOURS)
        candidates = []

        for issue in issues:
            if _status_category(issue) == "done":
                continue
            fields = issue.get("fields", {})
            last_change = fields.get("statuscategorychangedate") or fields.get("updated")
            changed_at = parse_date(last_change)
            if not changed_at or changed_at >= threshold:
                continue
            candidates.append({
                "issueKey": issue.get("key", ""),
                "summary": (fields.get("summary") or "")[:80],
                "status": (fields.get("status") or {}).get("name", ""),
                "assignee": _display_name(fields.get("assignee")),
                "reporter": _display_name(fields.get("reporter")),
                "updated": last_change or "",
                "issueUrl": self._issue_url(issue.get("key", "")),
            })

        return candidates

    def _find_previous_sprint(self, sprints: list, sprint: dict) -> Optional[dict]:
        """The closed sprint before the current one, if any."""
        closed = [s for s in sprints if str(s.get("state") or "").lower() == "closed"]
        closed.sort(key=lambda s: to_timestamp(s.get("endDate")) or 0, reverse=True)

        if str(sprint.get("state") or "").lower() == "active":
            prior = closed[0] if closed else None
        else:
            current_end = to_timestamp(sprint.get("endDate"))
            prior = next(
                (s for s in closed
                 if s.get("id") != sprint.get("id")
                 and (current_end is None or (to_timestamp(s.get("endDate")) or 0) < current_end)),
                None
            )

        if not prior or prior.get("id") == sprint.get("id"):
            return None
        return prior

    def _summarize_previous_sprint(self, prior: dict, issues: list,
                                   sp_field: Optional[str]) -> dict:
        done_sp = 0.0
        done_stories = 0
        for issue in issues:
            if not is_story_issue(issue) or _status_category(issue) != "done":
                continue
            done_stories += 1
            done_sp += get_story_points(issue, sp_field)

        return {
            "id": prior.get("id"),
            "name": prior.get("name") or "",
            "doneSP": done_sp,
            "doneStories": done_stories,
        }

    def _empty_payload(self, board: dict) -> dict:
        return {
            "board": board,
            "sprint": None,
            "summary": None,
            "plannedWindow": None,
            "observedWorkWindow": None,
            "flags": None,
            "daysMeta": None,
            "dailyCompletions": {"stories": [], "subtasks": []},
            "remainingWorkByDay": [],
            "idealBurndown": [],
            "scopeChanges": [],
            "scopeChangeSummary": {},
            "subtaskTracking": None,
            "stuckCandidates": [],
            "previousSprint": None,
            "recentSprints": [],
            "nextSprint": None,
            "stories": [],
            "assumptions": list(DEFAULT_ASSUMPTIONS),
        }

    def build_payload(self, board: dict, sprints: list, sprint: Optional[dict], issues: list,
                      sp_field: Optional[str], previous_sprint: Optional[dict] = None,
                      recent_limit: int = DEFAULT_RECENT_SPRINTS_LIMIT, now=None) -> dict:
        """Assemble the dashboard payload from already-fetched data."""
        if not sprint:
            return self._empty_payload(board)

        start_date = sprint.get("startDate")
        end_date = sprint.get("endDate")
        observed = self._compute_observed_work_window(issues)
        days_meta = self._compute_days_meta(sprint, now)
        remaining_work = self._compute_remaining_work_by_day(issues, start_date, end_date, sp_field)
        scope_changes, scope_summary = self._compute_scope_changes(issues, start_date, sp_field)
        subtask_tracking = self._compute_subtask_tracking(issues, now)
        stories = self._compute_stories_list(issues, sp_field)

        summary = compute_sprint_summary(stories, issues, sp_field, self.split_rules)
        tracking_summary = subtask_tracking["summary"]
        summary["subtaskEstimatedHours"] = tracking_summary["totalEstimateHours"]
        summary["subtaskLoggedHours"] = tracking_summary["totalLoggedHours"]
        summary["subtaskMissingEstimate"] = tracking_summary["missingEstimate"]
        summary["subtaskMissingLogged"] = tracking_summary["missingLogged"]
        summary["subtaskStuckOver24h"] = tracking_summary["stuckOver24hCount"]

        return {
            "board": board,
            "sprint": {
                "id": sprint.get("id"),
                "name": sprint.get("name"),
                "state": sprint.get("state") or "",
                "startDate": start_date or "",
                "endDate": end_date or "",
                "calendarDays": days_meta["calendarDays"],
                "workingDays": days_meta["workingDays"],
            },
            "summary": summary,
            "plannedWindow": {"start": start_date or None, "end": end_date or None},
            "observedWorkWindow": observed if observed["start"] or observed["end"] else None,
            "flags": self._compute_flags(observed, start_date, end_date),
            "daysMeta": days_meta,
            "dailyCompletions": self._compute_daily_completions(issues, sp_field),
            "remainingWorkByDay": remaining_work,
            "idealBurndown": compute_ideal_burndown(remaining_work),
            "scopeChanges": scope_changes,
            "scopeChangeSummary": scope_summary,
            "subtaskTracking": subtask_tracking,
            "stuckCandidates": self._compute_stuck_candidates(issues, now),
            "previousSprint": previous_sprint,
            "recentSprints": resolve_recent_sprints(sprints, sprint, recent_limit),
            "nextSprint": resolve_next_sprint(sprints, sprint),
            "stories": stories,
            "assumptions": list(DEFAULT_ASSUMPTIONS),
        }

    def get_current_sprint(self, board_id: int, sprint_id=None,
                           use_recent_closed_if_no_active: bool = True,
                           recent_closed_within_days: int = DEFAULT_RECENT_CLOSED_WITHIN_DAYS,
                           recent_limit: int = DEFAULT_RECENT_SPRINTS_LIMIT,
                           now=None) -> dict:
        """Fetch a board's data and build its current-sprint payload.

        Args:
            board_id: Jira board ID
            sprint_id: Optional sprint to show instead of the active one
            use_recent_closed_if_no_active: Fall back to a recently closed sprint
            recent_closed_within_days: How far back that fallback looks
            recent_limit: Number of sprint tabs to return
            now: Current time, defaults to UTC now
        """
        board = self._get_board(board_id)
        sprints = self.get_sprints(board_id)
        sprint = resolve_sprint_from_list(
            sprints,
            sprint_id=sprint_id,
            use_recent_closed_if_no_active=use_recent_closed_if_no_active,
            recent_closed_within_days=recent_closed_within_days,
            now=now,
        )

        if not sprint:
            logger.info("No current sprint for board %s (%d sprints)", board_id, len(sprints))
            return self.build_payload(board, sprints, None, [], None, now=now)

        sp_field = self._get_story_points_field()
        issues = self._get_sprint_issues(sprint["id"], board["projectKeys"])

        previous_sprint = None
        prior = self._find_previous_sprint(sprints, sprint)
        if prior:
            try:
                prior_issues = self._get_sprint_issues(prior["id"], board["projectKeys"])
                previous_sprint = self._summarize_previous_sprint(prior, prior_issues, sp_field)
            except requests.exceptions.RequestException as e:
                logger.warning("Previous sprint comparison skipped for board %s: %s", board_id, e)

        return self.build_payload(
            board, sprints, sprint, issues, sp_field,
            previous_sprint=previous_sprint, recent_limit=recent_limit, now=now,
        )
