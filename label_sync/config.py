"""
config.py - Run configuration

Settings are collected once at startup from, in order of precedence:
command-line flags, GitHub Actions inputs (INPUT_* environment variables),
config.yaml/secrets.yaml in an optional config directory, and the
triggering event payload. The result is validated before any network
call is made.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from .auth import AuthStrategy, resolve_auth_strategy
from .client import DEFAULT_API_URL
from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_LABEL_COLUMN = "Label"
DEFAULT_SERVER_URL = "https://github.com"
CONFIG_SECTION = "label_sync"

SETTINGS = [
    "csv_file_path",
    "csv_label_header",
    "repository",
    "issue_number",
    "project_number",
    "label",
    "api_url",
]
SECRETS = [
    "app_id",
    "app_private_key",
    "app_installation_id",
    "token",
]


@dataclass(frozen=True)
class SyncConfig:
    csv_path: str
    label_column: str
    org: str
    repo: str
    issue_number: int
    project_number: int
    label: str
    auth: AuthStrategy
    api_url: str = DEFAULT_API_URL
    issue_link: str = ""


def load_yaml(filename, config_dir):
    path = Path(config_dir) / filename
    if not path.exists():
        return {}
    try:
        with open(path, "r") as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")


def load_event_payload(event_path):
    """
    Load the triggering event's JSON payload
    Returns an empty dict when not running from an event
    """
    if not event_path or not Path(event_path).exists():
        return {}
    try:
        with open(event_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except ValueError as e:
        raise ConfigError(f"Invalid event payload in {event_path}: {e}")


def _positive_int(name, value):
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got '{value}'")
    if number <= 0:
        raise ConfigError(f"{name} must be a positive number, got '{value}'")
    return number


def _collect_inputs(args, environ):
    """Merge every source into one dict of raw string settings"""
    file_values = {}
    config_dir = getattr(args, "config_dir", None)
    if config_dir:
        if not Path(config_dir).is_dir():
            raise ConfigError(f"Config directory not found: {config_dir}")
        config = load_yaml("config.yaml", config_dir)
        secrets = load_yaml("secrets.yaml", config_dir)
        file_values.update(config.get(CONFIG_SECTION) or {})
        file_values.update({k: v for k, v in secrets.items() if k in SECRETS})
        # Same key the kickoff secrets.yaml files use
        if "github_token" in secrets and "token" not in file_values:
            file_values["token"] = secrets["github_token"]

    inputs = {}
    for name in SETTINGS + SECRETS:
        for value in (
            getattr(args, name, None),
            environ.get(f"INPUT_{name.upper()}"),
            file_values.get(name),
        ):
            if value not in (None, ""):
                inputs[name] = str(value).strip() if name != "app_private_key" else str(value)
                break
    return inputs


def load_config(args, environ) -> SyncConfig:
    """
    Build and validate the run configuration
    Raises ConfigError naming the first missing or invalid setting
    """
    inputs = _collect_inputs(args, environ)
    payload = load_event_payload(environ.get("GITHUB_EVENT_PATH"))
    issue = payload.get("issue") or {}

    csv_path = inputs.get("csv_file_path")
    if not csv_path:
        raise ConfigError("CSV file path is required (CSV_FILE_PATH)")

    full_name = inputs.get("repository") or (payload.get("repository") or {}).get("full_name")
    if not full_name:
        raise ConfigError("Repository is required (REPOSITORY) when not triggered by an issue event")
    parts = full_name.split("/")
    if len(parts) != 2 or not all(parts):
        raise ConfigError(f"Repository must be in owner/name form, got '{full_name}'")
    org, repo = parts

    issue_number = inputs.get("issue_number") or issue.get("number")
    if not issue_number:
        raise ConfigError("Issue number is required (ISSUE_NUMBER) when not triggered by an issue event")
    issue_number = _positive_int("Issue number", issue_number)

    if not inputs.get("project_number"):
        raise ConfigError("Project number is required (PROJECT_NUMBER)")
    project_number = _positive_int("Project number", inputs["project_number"])

    label = inputs.get("label") or (payload.get("label") or {}).get("name")
    if not label:
        raise ConfigError("Label is required (LABEL) when not triggered by a labeled event")

    auth = resolve_auth_strategy(
        app_id=inputs.get("app_id"),
        private_key=inputs.get("app_private_key"),
        installation_id=inputs.get("app_installation_id"),
        token=inputs.get("token"),
    )

    server_url = environ.get("GITHUB_SERVER_URL") or DEFAULT_SERVER_URL
    issue_link = issue.get("html_url") or f"{server_url.rstrip('/')}/{org}/{repo}/issues/{issue_number}"

    config = SyncConfig(
        csv_path=csv_path,
        label_column=inputs.get("csv_label_header") or DEFAULT_LABEL_COLUMN,
        org=org,
        repo=repo,
        issue_number=issue_number,
        project_number=project_number,
        label=label,
        auth=auth,
        api_url=inputs.get("api_url") or DEFAULT_API_URL,
        issue_link=issue_link,
    )
    logger.debug(f"Inputs: {config}")
    return config
