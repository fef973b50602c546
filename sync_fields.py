#!/usr/bin/env python3
"""
sync_fields.py - Set GitHub Project fields on an issue from its label

Looks up the applied label in a CSV mapping file and sets the
single-select project fields listed in that row on the issue's
project item.

Runs as a GitHub Action step (inputs come from INPUT_* variables and
the event payload) or locally with command-line flags and an optional
--config-dir holding config.yaml and secrets.yaml.
"""

import argparse
import logging
import os
import sys

from label_sync.auth import get_token
from label_sync.client import GraphQLClient, fetch_project_state, find_project_item
from label_sync.config import load_config
from label_sync.errors import ConfigError, LabelSyncError
from label_sync.summary import RunSummary, report_failure
from label_sync.table import build_plan, load_table, select_row
from label_sync.updater import apply_plan

logger = logging.getLogger('label_sync')


def run(config, summary, client=None):
    """
    Sync the issue's project fields for the configured label
    Returns the list of field assignments applied
    """
    logger.info(f"Issue #{config.issue_number}: {config.issue_link}")
    summary.add_link(f"Issue #{config.issue_number}", config.issue_link)

    table = load_table(config.csv_path)
    row = select_row(table, config.label_column, config.label)
    if row is None:
        message = f'Input label "{config.label}" not found in csv file ({config.csv_path}). No action taken.'
        logger.info(message)
        summary.add_raw(message)
        return []
    logger.debug(f"csvLine: {row.as_dict()}")

    plan = build_plan(row, config.label_column)
    logger.debug(f"plan: {plan}")
    if not plan:
        message = f'Label "{config.label}" has no field values in csv file ({config.csv_path}). No action taken.'
        logger.info(message)
        summary.add_raw(message)
        return []

    if client is None:
        client = GraphQLClient(get_token(config.auth, config.api_url), api_url=config.api_url)

    state = fetch_project_state(
        client, config.org, config.repo, config.issue_number, config.project_number
    )
    item = find_project_item(state)
    if item is None:
        raise ConfigError(
            f"Issue #{config.issue_number} not attached to the project number {config.project_number}."
        )

    logger.info("Updating project fields")
    return apply_plan(client, state.project, item, plan, config.label, on_applied=summary.field_set)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Set GitHub Project fields on an issue based on a label and a CSV mapping")
    parser.add_argument("--csv", dest="csv_file_path", help="Path to the label mapping CSV file")
    parser.add_argument("--label-header", dest="csv_label_header", help="Name of the label column in the CSV (default: Label)")
    parser.add_argument("--repository", help="Repository in owner/name form")
    parser.add_argument("--issue-number", help="Issue number")
    parser.add_argument("--project-number", help="Organization project (v2) number")
    parser.add_argument("--label", help="Label applied to the issue")
    parser.add_argument("--api-url", help="GitHub API base URL (default: https://api.github.com)")
    parser.add_argument("--config-dir", help="Directory containing config.yaml and secrets.yaml")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point for the script"""
    args = parse_args(argv)
    debug = args.debug or os.environ.get("RUNNER_DEBUG") == "1"

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    summary = RunSummary(os.environ.get("GITHUB_STEP_SUMMARY"))
    try:
        config = load_config(args, os.environ)
        run(config, summary)
    except LabelSyncError as e:
        report_failure(str(e))
        summary.write()
        return 1

    summary.write()
    return 0


if __name__ == "__main__":
    sys.exit(main())
