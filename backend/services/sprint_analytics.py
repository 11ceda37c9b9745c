"""Sprint analytics: sprint resolution, ideal burndown, sprint ranking and summary.

Everything here is a pure function over already-fetched Jira data. Missing
or malformed fields degrade to "", 0, None or [] instead of raising, so the
dashboard can always render something.
"""

import logging
import math
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from services.issue_classification import (
    FEATURE,
    classify_issue_type_for_split,
    get_story_points,
    to_points,
)

logger = logging.getLogger(__name__)

DEFAULT_RECENT_CLOSED_WITHIN_DAYS = 14
DEFAULT_RECENT_SPRINTS_LIMIT = 6

# Jira formats: "2024-10-31T12:11:56.289-0400", "2024-01-14T00:00:00.000Z", "2024-01-14"
_DATE_FORMATS = [
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d",
]


def parse_date(value) -> Optional[datetime]:
    """Parse a Jira date into an aware UTC datetime.

    Values without a timezone are taken as UTC. Returns None for empty or
    unparseable input.
    """
    if not value:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        parsed = None
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(str(value).strip(), fmt)
                break
            except ValueError:
                continue
        if parsed is None:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_timestamp(value) -> Optional[float]:
    """Seconds since the epoch for a Jira date, or None."""
    parsed = parse_date(value)
    return parsed.timestamp() if parsed else None


def to_date_only(value) -> str:
    """Normalize a timestamp to a "YYYY-MM-DD" string in UTC ("" if unusable)."""
    parsed = parse_date(value)
    return parsed.date().isoformat() if parsed else ""


def round_half_up(value: float, digits: int = 0):
    """Round like a dashboard would: 62.5 -> 63, 0.125 -> 0.13 for 2 digits."""
    factor = 10 ** digits
    rounded = math.floor(value * factor + 0.5)
    return rounded if digits == 0 else rounded / factor


def utc_now(now=None) -> datetime:
    """Normalize an injected "now" (datetime or ISO string) to UTC."""
    if now is None:
        return datetime.now(timezone.utc)
    return parse_date(now) or datetime.now(timezone.utc)


def _to_number(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def _state(sprint: dict) -> str:
    return str(sprint.get("state") or "").lower()


def _id_sort_key(sprint: dict) -> tuple:
    """Deterministic tie-break: numeric ids ascending, then anything else."""
    sprint_id = sprint.get("id")
    number = _to_number(sprint_id)
    if number is not None:
        return (0, number, "")
    return (1, 0, str(sprint_id))


def compute_ideal_burndown(remaining_work_by_day) -> list:
    """Linear ideal burndown from the day-0 remaining points to zero.

    Args:
        remaining_work_by_day: List of {"date", "remainingSP"} points

    Returns:
        List of {"date", "remainingSP"} with the same dates, where remainingSP
        falls linearly from the first point's value to 0 on the last day
        (rounded to 2 decimals, never negative). A single day is a flat line.
    """
    if not remaining_work_by_day:
        return []

    total_sp = remaining_work_by_day[0].get("remainingSP") or 0
    days = len(remaining_work_by_day)

    if days == 1:
        return [{"date": remaining_work_by_day[0].get("date"), "remainingSP": total_sp}]

    ideal = []
    for index, point in enumerate(remaining_work_by_day):
        pct = index / (days - 1)
        remaining = max(0, round_half_up(total_sp - total_sp * pct, 2))
        ideal.append({"date": point.get("date"), "remainingSP": remaining})
    return ideal


def resolve_sprint_from_list(sprints, sprint_id=None,
                             use_recent_closed_if_no_active: bool = True,
                             recent_closed_within_days: int = DEFAULT_RECENT_CLOSED_WITHIN_DAYS,
                             now=None) -> Optional[dict]:
    """Pick the sprint to treat as "current" for a board.

    Priority:
        1. The sprint whose id matches sprint_id (numeric comparison)
        2. The first active sprint
        3. The closed sprint with the latest endDate within the last
           recent_closed_within_days days (when the fallback is enabled)

    Args:
        sprints: Raw Jira sprint dicts for the board
        sprint_id: Optional explicit sprint id (int or numeric string)
        use_recent_closed_if_no_active: Fall back to a recently closed sprint
        recent_closed_within_days: How far back the fallback looks
        now: Current time (datetime or ISO string), defaults to UTC now

    Returns:
        The selected sprint dict (not copied), or None
    """
    sprints = [s for s in (sprints or []) if isinstance(s, dict)]

    target_id = _to_number(sprint_id)
    if target_id is not None:
        for sprint in sprints:
            if _to_number(sprint.get("id")) == target_id:
                return sprint
        logger.debug("Sprint %s not found in %d sprints", sprint_id, len(sprints))

    for sprint in sprints:
        if _state(sprint) == "active":
            return sprint

    if use_recent_closed_if_no_active is None:
        use_recent_closed_if_no_active = True
    if not use_recent_closed_if_no_active:
        return None

    within_days = _to_number(recent_closed_within_days)
    if within_days is None:
        within_days = DEFAULT_RECENT_CLOSED_WITHIN_DAYS
    try:
        cutoff = utc_now(now) - timedelta(days=within_days)
    except OverflowError:
        cutoff = (datetime.min if within_days > 0 else datetime.max).replace(tzinfo=timezone.utc)
    cutoff_ts = cutoff.timestamp()

    candidates = []
    for sprint in sprints:
        if _state(sprint) != "closed":
            continue
        end_ts = to_timestamp(sprint.get("endDate"))
        if end_ts is None or end_ts < cutoff_ts:
            continue
        candidates.append((end_ts, sprint))

    if not candidates:
        return None

    candidates.sort(key=lambda pair: (-pair[0], _id_sort_key(pair[1])))
    return candidates[0][1]


def resolve_recent_sprints(sprints, current_sprint: Optional[dict],
                           max_items: int = DEFAULT_RECENT_SPRINTS_LIMIT) -> list:
    """Sprints worth a navigation tab: the current one plus active/closed ones.

    Newest first by endDate (startDate, then epoch as fallbacks), de-duplicated
    by id and capped at max_items. Future sprints are left out.
    """
    if not isinstance(sprints, list):
        return []

    normalized = {}
    if current_sprint:
        current = dict(current_sprint)
        state = _state(current_sprint)
        if state:
            current["state"] = state
        normalized[current.get("id")] = current

    for sprint in sprints:
        if not isinstance(sprint, dict) or sprint.get("id") is None:
            continue
        state = _state(sprint)
        if state not in ("active", "closed"):
            continue
        if sprint["id"] not in normalized:
            normalized[sprint["id"]] = {**sprint, "state": state}

    def sort_key(sprint):
        ts = to_timestamp(sprint.get("endDate"))
        if ts is None:
            ts = to_timestamp(sprint.get("startDate"))
        return (-(ts or 0), _id_sort_key(sprint))

    ranked = sorted(normalized.values(), key=sort_key)[:max_items]

    return [
        {
            "id": sprint.get("id"),
            "name": sprint.get("name") or "",
            "state": sprint.get("state") or "",
            "startDate": sprint.get("startDate") or "",
            "endDate": sprint.get("endDate") or "",
        }
        for sprint in ranked
    ]


def resolve_next_sprint(sprints, current_sprint: Optional[dict]) -> Optional[dict]:
    """The upcoming sprint: future state, or starting after the current one ends."""
    if not current_sprint or not isinstance(sprints, list):
        return None

    current_end = to_timestamp(current_sprint.get("endDate"))

    candidates = []
    for sprint in sprints:
        if not isinstance(sprint, dict):
            continue
        start_ts = to_timestamp(sprint.get("startDate"))
        if _state(sprint) == "future":
            candidates.append(sprint)
        elif current_end is not None and start_ts is not None and start_ts > current_end:
            candidates.append(sprint)

    if not candidates:
        return None

    candidates.sort(key=lambda s: (to_timestamp(s.get("startDate")) or 0, _id_sort_key(s)))
    upcoming = candidates[0]
    return {
        "id": upcoming.get("id"),
        "name": upcoming.get("name") or "",
        "goal": upcoming.get("goal") or "",
        "startDate": upcoming.get("startDate") or "",
        "endDate": upcoming.get("endDate") or "",
    }


def compute_sprint_summary(stories, all_issues, story_points_field_id: Optional[str],
                           split_rules=None) -> dict:
    """Aggregate sprint totals for the summary cards.

    Args:
        stories: Derived stories ({"storyPoints", "completionPct", ...})
        all_issues: Every raw Jira issue in the sprint (bugs, tasks, subtasks too)
        story_points_field_id: Custom field holding story points, may be None
        split_rules: Optional feature/support rules for the classifier

    percentDone is story-point based when any story is estimated, otherwise
    it falls back to the share of done stories.
    """
    stories = stories or []
    all_issues = all_issues or []

    total_stories = len(stories)
    done = [s for s in stories if s.get("completionPct") == 100]
    done_stories = len(done)
    total_sp = sum(to_points(s.get("storyPoints")) for s in stories)
    done_sp = sum(to_points(s.get("storyPoints")) for s in done)

    if total_sp > 0:
        percent_done = round_half_up(done_sp / total_sp * 100)
    elif total_stories > 0:
        percent_done = round_half_up(done_stories / total_stories * 100)
    else:
        percent_done = 0

    new_features_sp = 0.0
    support_ops_sp = 0.0
    total_all_sp = 0.0
    for issue in all_issues:
        points = get_story_points(issue, story_points_field_id)
        total_all_sp += points
        if classify_issue_type_for_split(issue, split_rules) == FEATURE:
            new_features_sp += points
        else:
            support_ops_sp += points

    return {
        "totalStories": total_stories,
        "doneStories": done_stories,
        "totalSP": total_sp,
        "doneSP": done_sp,
        "percentDone": percent_done,
        "newFeaturesSP": new_features_sp,
        "supportOpsSP": support_ops_sp,
        "totalAllSP": total_all_sp,
    }
