"""Shared fixtures for Sprint Report Engine tests."""

import os
import sys
from datetime import datetime, timezone

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


@pytest.fixture
def mock_jira_credentials():
    """Mock Jira credentials for testing."""
    return {
        "server": "https://test.atlassian.net",
        "email": "test@example.com",
        "token": "test-token-123"
    }


@pytest.fixture
def jira_headers():
    """Request headers carrying Jira credentials."""
    return {
        "X-Jira-Server": "https://test.atlassian.net",
        "X-Jira-Email": "test@example.com",
        "X-Jira-Token": "test-token-123"
    }


@pytest.fixture
def fixed_now():
    """A fixed 'now' inside the active sample sprint."""
    return datetime(2025, 6, 5, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def active_sprint():
    """Sample active sprint."""
    return {
        "id": 5,
        "name": "Sprint 5",
        "state": "active",
        "startDate": "2025-06-01T00:00:00.000Z",
        "endDate": "2025-06-14T00:00:00.000Z",
        "goal": "Ship checkout"
    }


@pytest.fixture
def board_sprints(active_sprint):
    """A board's sprints in Jira order: closed history, the active one, futures."""
    return [
        {
            "id": 3,
            "name": "Sprint 3",
            "state": "closed",
            "startDate": "2025-05-04T00:00:00.000Z",
            "endDate": "2025-05-17T00:00:00.000Z"
        },
        {
            "id": 4,
            "name": "Sprint 4",
            "state": "closed",
            "startDate": "2025-05-18T00:00:00.000Z",
            "endDate": "2025-05-31T00:00:00.000Z"
        },
        active_sprint,
        {
            "id": 7,
            "name": "Sprint 7",
            "state": "future",
            "startDate": "2025-06-29T00:00:00.000Z",
            "endDate": "2025-07-12T00:00:00.000Z"
        },
        {
            "id": 6,
            "name": "Sprint 6",
            "state": "future",
            "startDate": "2025-06-15T00:00:00.000Z",
            "endDate": "2025-06-28T00:00:00.000Z",
            "goal": "Payments v2"
        }
    ]


@pytest.fixture
def sample_story_done():
    """Done story with 5 points, resolved on day 3."""
    return {
        "key": "A-1",
        "fields": {
            "summary": "Checkout page",
            "issuetype": {"name": "Story", "subtask": False},
            "status": {"name": "Done", "statusCategory": {"key": "done"}},
            "created": "2025-05-30T10:00:00.000+0000",
            "resolutiondate": "2025-06-03T15:00:00.000+0000",
            "updated": "2025-06-03T15:00:00.000+0000",
            "assignee": {"displayName": "Ana"},
            "reporter": {"displayName": "Ben"},
            "timetracking": {"originalEstimateSeconds": 28800, "timeSpentSeconds": 14400},
            "customfield_10016": 5
        }
    }


@pytest.fixture
def sample_story_open():
    """Open story with 3 points."""
    return {
        "key": "A-2",
        "fields": {
            "summary": "Saved cards",
            "issuetype": {"name": "Story", "subtask": False},
            "status": {"name": "In Progress", "statusCategory": {"key": "indeterminate"}},
            "created": "2025-05-30T11:00:00.000+0000",
            "resolutiondate": None,
            "updated": "2025-06-02T09:00:00.000+0000",
            "statuscategorychangedate": "2025-06-02T09:00:00.000+0000",
            "assignee": {"displayName": "Ana"},
            "customfield_10016": "3"
        }
    }


@pytest.fixture
def sample_bug_added():
    """Bug added mid-sprint with 2 points."""
    return {
        "key": "A-3",
        "fields": {
            "summary": "Payment timeout",
            "issuetype": {"name": "Bug", "subtask": False},
            "status": {"name": "To Do", "statusCategory": {"key": "new"}},
            "created": "2025-06-04T08:00:00.000+0000",
            "resolutiondate": None,
            "updated": "2025-06-05T08:00:00.000+0000",
            "reporter": {"displayName": "Cam"},
            "customfield_10016": 2.0
        }
    }


@pytest.fixture
def sample_subtask():
    """Subtask under A-1 with an estimate but nothing logged."""
    return {
        "key": "A-4",
        "fields": {
            "summary": "Write API tests",
            "issuetype": {"name": "Sub-task", "subtask": True},
            "status": {"name": "In Progress", "statusCategory": {"key": "indeterminate"}},
            "created": "2025-06-01T09:00:00.000+0000",
            "statuscategorychangedate": "2025-06-02T09:00:00.000+0000",
            "parent": {"key": "A-1", "fields": {"summary": "Checkout page"}},
            "timetracking": {"originalEstimateSeconds": 7200, "timeSpentSeconds": 0}
        }
    }


@pytest.fixture
def sample_sprint_issues(sample_story_done, sample_story_open,
                         sample_bug_added, sample_subtask):
    """Collection of issues for the active sprint."""
    return [
        sample_story_done,
        sample_story_open,
        sample_bug_added,
        sample_subtask
    ]


@pytest.fixture
def mock_fields_response():
    """Mock response for Jira fields endpoint."""
    return [
        {"id": "customfield_10002", "name": "Story point estimate", "schema": {"type": "number"}},
        {"id": "customfield_10016", "name": "Story Points", "schema": {"type": "number"}},
        {"id": "customfield_10099", "name": "Story Points", "schema": {"type": "string"}},
        {"id": "summary", "name": "Summary", "schema": {"type": "string"}}
    ]


@pytest.fixture
def app(tmp_path):
    """Create Flask test app with default current sprint settings."""
    from app import create_app
    app = create_app(config_path=str(tmp_path / "missing-config.json"))
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    """Create Flask test client."""
    return app.test_client()
