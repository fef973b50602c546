"""Shared pytest fixtures for the label sync tests."""

import pytest

from label_sync.client import PROJECT_STATE_QUERY
from label_sync.errors import TransientError
from label_sync.updater import UPDATE_FIELD_MUTATION

PROJECT_ID = "PVT_project"
ITEM_ID = "PVTI_item"


def project_fields_payload():
    return [
        {"id": "PVTF_title", "name": "Title", "dataType": "TITLE"},
        {
            "id": "PVTSSF_status",
            "name": "Status",
            "dataType": "SINGLE_SELECT",
            "options": [
                {"id": "opt_todo", "name": "Todo"},
                {"id": "opt_triage", "name": "Triage"},
                {"id": "opt_done", "name": "Done"},
            ],
        },
        {
            "id": "PVTSSF_priority",
            "name": "Priority",
            "dataType": "SINGLE_SELECT",
            "options": [
                {"id": "opt_high", "name": "High"},
                {"id": "opt_low", "name": "Low"},
            ],
        },
        {"id": "PVTF_estimate", "name": "Estimate", "dataType": "NUMBER"},
        {},
    ]


def project_state_payload(items=None):
    if items is None:
        items = [
            {"id": "PVTI_other", "project": {"id": "PVT_other"}},
            {"id": ITEM_ID, "project": {"id": PROJECT_ID}},
        ]
    return {
        "organization": {
            "repository": {
                "issue": {
                    "id": "I_issue",
                    "projectItems": {"nodes": items},
                }
            },
            "projectV2": {
                "id": PROJECT_ID,
                "fields": {"nodes": project_fields_payload()},
            },
        }
    }


class FakeGraphQLClient:
    """Records every request and answers the two queries the sync makes"""

    def __init__(self, state=None, fail_on_field=None):
        self.state = state if state is not None else project_state_payload()
        self.fail_on_field = fail_on_field
        self.calls = []

    @property
    def updates(self):
        return [variables for query, variables in self.calls if query == UPDATE_FIELD_MUTATION]

    def execute(self, query, variables=None):
        self.calls.append((query, variables))
        if query == PROJECT_STATE_QUERY:
            return self.state
        if query == UPDATE_FIELD_MUTATION:
            if self.fail_on_field and variables["fieldId"] == self.fail_on_field:
                raise TransientError("GraphQL errors: Something went wrong")
            return {"updateProjectV2ItemFieldValue": {"projectV2Item": {"id": variables["itemId"]}}}
        raise AssertionError(f"Unexpected query: {query}")


@pytest.fixture
def fake_client():
    return FakeGraphQLClient()


@pytest.fixture
def write_csv(tmp_path):
    """Write CSV text to a temp file and return its path"""
    def _write(text, name="labels.csv", encoding="utf-8"):
        path = tmp_path / name
        path.write_text(text, encoding=encoding)
        return path
    return _write
