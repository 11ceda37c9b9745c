"""Tests for issue type classification."""

import json
import os

import pytest

from services.issue_classification import (
    build_split_rules,
    classify_issue_type_for_split,
    classify_scope_change,
    get_story_points,
    is_story_issue,
    is_subtask_issue,
    is_work_item_issue,
    to_points,
)


def issue_of_type(name):
    return {"fields": {"issuetype": {"name": name}}}


class TestIssueTypeQuestions:
    """Test story / work item / subtask checks."""

    def test_story_matches_any_story_type(self):
        """Story check is a case-insensitive substring match."""
        assert is_story_issue(issue_of_type("Story")) is True
        assert is_story_issue(issue_of_type("User Story")) is True
        assert is_story_issue(issue_of_type("Bug")) is False

    def test_subtask_spellings(self):
        """Both 'Sub-task' and 'Subtask' count as subtasks."""
        assert is_subtask_issue(issue_of_type("Sub-task")) is True
        assert is_subtask_issue(issue_of_type("Subtask")) is True
        assert is_subtask_issue(issue_of_type("Task")) is False

    def test_work_item_excludes_subtasks(self):
        """Work items are every typed issue except subtasks."""
        assert is_work_item_issue(issue_of_type("Bug")) is True
        assert is_work_item_issue(issue_of_type("Random Type")) is True
        assert is_work_item_issue(issue_of_type("Sub-task")) is False

    def test_missing_type_is_not_a_work_item(self):
        """An issue without a type name is not a work item."""
        assert is_work_item_issue({"fields": {}}) is False
        assert is_work_item_issue({}) is False
        assert is_work_item_issue(None) is False


class TestClassifyIssueTypeForSplit:
    """Test the feature/support split."""

    @pytest.mark.parametrize("name,expected", [
        ("Story", "feature"),
        ("User Story", "feature"),
        ("Feature", "feature"),
        ("Improvement", "feature"),
        ("Bug", "support"),
        ("Support Request", "support"),
        ("DevOps", "support"),
        ("Operational Change", "support"),
        ("Task", "support"),
        ("Chore", "support"),
        ("Maintenance", "support"),
        ("Sub-task", "support"),
        ("Random Type", "support"),
        ("", "support"),
    ])
    def test_classification_table(self, name, expected):
        """Every type name lands in exactly one bucket."""
        assert classify_issue_type_for_split(issue_of_type(name)) == expected

    def test_support_keywords_win_over_feature_keywords(self):
        """Earlier rules take priority: 'Story Bug' is support."""
        assert classify_issue_type_for_split(issue_of_type("Story Bug")) == "support"
        assert classify_issue_type_for_split(issue_of_type("Feature Task")) == "support"

    def test_malformed_issues_default_to_support(self):
        """Missing fields never raise."""
        assert classify_issue_type_for_split(None) == "support"
        assert classify_issue_type_for_split({"fields": {"issuetype": None}}) == "support"

    def test_custom_rules_from_config(self):
        """Configured keyword lists replace the defaults."""
        rules = build_split_rules({"support": ["incident"], "feature": ["epic work", "spike"]})

        assert classify_issue_type_for_split(issue_of_type("Spike"), rules) == "feature"
        assert classify_issue_type_for_split(issue_of_type("Incident"), rules) == "support"
        # "story" is no longer a feature keyword, so it falls through to support
        assert classify_issue_type_for_split(issue_of_type("Story"), rules) == "support"

    def test_empty_config_keeps_defaults(self):
        """No issueTypeSplit section means the built-in rules."""
        rules = build_split_rules({})
        assert classify_issue_type_for_split(issue_of_type("Story"), rules) == "feature"
        assert build_split_rules(None) == build_split_rules({"support": [], "feature": []})


class TestClassifyScopeChange:
    """Test the bug/feature/support classification for added scope."""

    def test_scope_change_buckets(self):
        assert classify_scope_change(issue_of_type("Bug")) == "bug"
        assert classify_scope_change(issue_of_type("Story")) == "feature"
        assert classify_scope_change(issue_of_type("New Feature")) == "feature"
        assert classify_scope_change(issue_of_type("Task")) == "support"
        assert classify_scope_change({}) == "support"


class TestGetStoryPoints:
    """Test story points extraction."""

    def test_reads_numeric_field(self):
        issue = {"fields": {"customfield_10016": 5.0}}
        assert get_story_points(issue, "customfield_10016") == 5.0

    def test_parses_numeric_strings(self):
        """Strings use their leading number."""
        assert get_story_points({"fields": {"sp": "3"}}, "sp") == 3.0
        assert get_story_points({"fields": {"sp": "3.5pts"}}, "sp") == 3.5

    def test_unusable_values_are_zero(self):
        """None, junk strings, booleans and NaN all count as 0."""
        assert get_story_points({"fields": {"sp": None}}, "sp") == 0.0
        assert get_story_points({"fields": {"sp": "invalid"}}, "sp") == 0.0
        assert get_story_points({"fields": {"sp": True}}, "sp") == 0.0
        assert to_points(float("nan")) == 0.0

    def test_missing_field_id_is_zero(self):
        """Without a field id story points are 0 everywhere."""
        issue = {"fields": {"customfield_10016": 8}}
        assert get_story_points(issue, None) == 0.0
        assert get_story_points(issue, "") == 0.0
        assert get_story_points(issue, "customfield_99999") == 0.0


class TestExampleConfig:
    """Test the checked-in example config."""

    def test_example_split_matches_defaults(self):
        """Copying the example config keeps the built-in classification."""
        example_path = os.path.join(
            os.path.dirname(__file__), "..", "config", "current-sprint-config.example.json"
        )
        with open(example_path, "r") as f:
            example = json.load(f)

        rules = build_split_rules(example["issueTypeSplit"])
        for name in ("Story", "Bug", "Spike", "Incident", "Task", "Improvement", "Epic", "DevOps"):
            issue = issue_of_type(name)
            assert classify_issue_type_for_split(issue, rules) == classify_issue_type_for_split(issue)
