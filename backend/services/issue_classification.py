"""Issue type classification for current-sprint reporting.

Answers story / work item / subtask questions and the feature vs support
split, based only on the lowercased issue type name.
"""

import math
import re
from typing import Optional

FEATURE = "feature"
SUPPORT = "support"

# Ordered (keywords, bucket) rules - first match wins
DEFAULT_SPLIT_RULES = (
    (("bug", "support", "ops", "operation"), SUPPORT),
    (("task", "chore", "maintenance"), SUPPORT),
    (("story", "feature", "improvement"), FEATURE),
)

SUBTASK_MARKERS = ("sub-task", "subtask")

_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def normalize_issue_type_name(issue) -> str:
    """Return the lowercased issue type name, or "" when missing."""
    if not isinstance(issue, dict):
        return ""
    fields = issue.get("fields") or {}
    issue_type = fields.get("issuetype") or {}
    name = issue_type.get("name") if isinstance(issue_type, dict) else None
    return str(name or "").lower()


def is_story_issue(issue) -> bool:
    return "story" in normalize_issue_type_name(issue)


def is_subtask_issue(issue) -> bool:
    issue_type = normalize_issue_type_name(issue)
    return any(marker in issue_type for marker in SUBTASK_MARKERS)


def is_work_item_issue(issue) -> bool:
    """Any typed issue that is not a subtask (unknown types included)."""
    issue_type = normalize_issue_type_name(issue)
    if not issue_type:
        return False
    return not any(marker in issue_type for marker in SUBTASK_MARKERS)


def classify_issue_type_for_split(issue, rules=None) -> str:
    """Put an issue in the 'feature' or 'support' reporting bucket.

    Args:
        issue: Raw Jira issue dict
        rules: Optional ordered sequence of (keywords, bucket) pairs,
            defaults to DEFAULT_SPLIT_RULES

    Empty and unrecognized type names always land in 'support'.
    """
    issue_type = normalize_issue_type_name(issue)
    if not issue_type:
        return SUPPORT

    for keywords, bucket in (rules if rules is not None else DEFAULT_SPLIT_RULES):
        if any(keyword in issue_type for keyword in keywords):
            return bucket

    return SUPPORT


def build_split_rules(config: Optional[dict]) -> tuple:
    """Build split rules from an issueTypeSplit config section.

    Expects {"support": [...], "feature": [...]}. Support keywords are
    checked before feature keywords. A missing or empty section keeps the
    defaults.
    """
    if not config:
        return DEFAULT_SPLIT_RULES

    support = tuple(str(k).lower() for k in config.get("support", []) if str(k).strip())
    feature = tuple(str(k).lower() for k in config.get("feature", []) if str(k).strip())
    if not support and not feature:
        return DEFAULT_SPLIT_RULES

    rules = []
    if support:
        rules.append((support, SUPPORT))
    if feature:
        rules.append((feature, FEATURE))
    return tuple(rules)


def classify_scope_change(issue) -> str:
    """Classify a mid-sprint addition as 'bug', 'feature' or 'support'."""
    issue_type = normalize_issue_type_name(issue)
    if "bug" in issue_type:
        return "bug"
    if "story" in issue_type or "feature" in issue_type:
        return FEATURE
    return SUPPORT


def to_points(value) -> float:
    """Coerce a story points value to a number, 0.0 when unusable.

    Numeric strings use their leading number, so "3.5pts" gives 3.5.
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        points = float(value)
    else:
        match = _LEADING_NUMBER.match(str(value))
        if not match:
            return 0.0
        points = float(match.group(0))

    if math.isnan(points):
        return 0.0
    return points


def get_story_points(issue, field_id: Optional[str]) -> float:
    """Read story points from an issue's custom field.

    A falsy field id, a missing field or a non-numeric value all give 0.0.
    """
    if not field_id or not isinstance(issue, dict):
        return 0.0
    fields = issue.get("fields") or {}
    return to_points(fields.get(field_id))
