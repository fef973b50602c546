"""
client.py - GitHub GraphQL access for Project (v2) metadata

This module sends GraphQL requests, reads the project's field catalogue
together with the issue's project items in a single query, and maps
API failures onto the run's error types.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import requests

from .errors import AuthError, NotFoundError, TransientError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
REQUEST_TIMEOUT = 30

PROJECT_STATE_QUERY = """
query projectFields($org: String!, $repo: String!, $issueNumber: Int!, $projectNumber: Int!) {
  organization(login: $org) {
    repository(name: $repo) {
      issue(number: $issueNumber) {
        id
        projectItems(first: 100) {
          nodes {
            id
            project {
              id
            }
          }
        }
      }
    }
    projectV2(number: $projectNumber) {
      id
      fields(first: 100) {
        nodes {
          ... on ProjectV2FieldCommon {
            id
            name
            dataType
          }
          ... on ProjectV2SingleSelectField {
            options {
              id
              name
            }
          }
        }
      }
    }
  }
}
"""


@dataclass(frozen=True)
class ProjectFieldDef:
    id: str
    name: str
    data_type: str
    # (option id, option name) in project order; empty unless single-select
    options: Tuple[Tuple[str, str], ...] = ()

    @property
    def is_single_select(self):
        return self.data_type == "SINGLE_SELECT"

    def option_id(self, option_name):
        for option_id, name in self.options:
            if name == option_name:
                return option_id
        return None


@dataclass(frozen=True)
class ProjectRef:
    id: str
    number: int
    fields: Tuple[ProjectFieldDef, ...]

    def field(self, name) -> Optional[ProjectFieldDef]:
        return next((f for f in self.fields if f.name == name), None)


@dataclass(frozen=True)
class IssueProjectItem:
    id: str
    project_id: str


@dataclass(frozen=True)
class ProjectState:
    project: ProjectRef
    items: Tuple[IssueProjectItem, ...]


def graphql_url_for(api_url):
    """
    GraphQL endpoint for a REST API base URL
    GitHub Enterprise serves REST under /api/v3 and GraphQL under /api/graphql
    """
    base = (api_url or DEFAULT_API_URL).rstrip("/")
    if base.endswith("/api/v3"):
        base = base[: -len("/v3")]
    return f"{base}/graphql"


class GraphQLClient:
    def __init__(self, token, api_url=DEFAULT_API_URL, session=None):
        self.url = graphql_url_for(api_url)
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
        })

    def execute(self, query, variables=None) -> Dict:
        """
        Run a GraphQL query or mutation
        Returns the "data" object of the response
        """
        try:
            response = self.session.post(
                self.url,
                json={"query": query, "variables": variables or {}},
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise TransientError(f"Request to {self.url} failed: {e}")

        if response.status_code == 401:
            raise AuthError(f"GitHub rejected the credentials (401): {response.text}")
        if response.status_code == 403:
            if "rate limit" in response.text.lower():
                raise TransientError(f"GitHub API rate limit exceeded: {response.text}")
            raise AuthError(f"Access denied by GitHub (403): {response.text}")
        if response.status_code == 404:
            raise NotFoundError(f"GraphQL endpoint not found: {self.url}")
        if response.status_code != 200:
            raise TransientError(f"GitHub API error ({response.status_code}): {response.text}")

        try:
            response_json = response.json()
        except ValueError:
            raise TransientError(f"GitHub API returned invalid JSON: {response.text[:200]}")

        if response_json.get("errors"):
            raise _classify_errors(response_json["errors"])

        return response_json.get("data") or {}


def _classify_errors(errors):
    messages = "; ".join(e.get("message", "Unknown error") for e in errors)
    types = {e.get("type") for e in errors}
    if "NOT_FOUND" in types:
        return NotFoundError(f"GraphQL errors: {messages}")
    if "FORBIDDEN" in types or "INSUFFICIENT_SCOPES" in types:
        return AuthError(f"GraphQL errors: {messages}")
    return TransientError(f"GraphQL errors: {messages}")


def fetch_project_state(client, org, repo, issue_number, project_number) -> ProjectState:
    """
    Read the project's fields and the issue's project items in one request
    Raises NotFoundError if any of org, repo, issue or project does not resolve
    """
    data = client.execute(PROJECT_STATE_QUERY, {
        "org": org,
        "repo": repo,
        "issueNumber": issue_number,
        "projectNumber": project_number,
    })
    logger.debug(f"project properties: {data}")

    organization = data.get("organization")
    if not organization:
        raise NotFoundError(f"Organization '{org}' not found")
    repository = organization.get("repository")
    if not repository:
        raise NotFoundError(f"Repository '{org}/{repo}' not found")
    issue = repository.get("issue")
    if not issue:
        raise NotFoundError(f"Issue #{issue_number} not found in {org}/{repo}")
    project = organization.get("projectV2")
    if not project:
        raise NotFoundError(f"Project number {project_number} not found in organization '{org}'")

    fields = []
    for node in project["fields"]["nodes"]:
        # Fields of types the query does not select come back empty
        if not node or "id" not in node:
            continue
        fields.append(ProjectFieldDef(
            id=node["id"],
            name=node["name"],
            data_type=node.get("dataType", ""),
            options=tuple((opt["id"], opt["name"]) for opt in node.get("options") or []),
        ))

    items = tuple(
        IssueProjectItem(id=item["id"], project_id=item["project"]["id"])
        for item in issue["projectItems"]["nodes"]
        if item and item.get("project")
    )

    return ProjectState(
        project=ProjectRef(id=project["id"], number=project_number, fields=tuple(fields)),
        items=items,
    )


def find_project_item(state) -> Optional[IssueProjectItem]:
    """The issue's item in the target project, or None if the issue is not in it"""
    return next((item for item in state.items if item.project_id == state.project.id), None)
