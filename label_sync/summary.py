"""
summary.py - Run summary and failure reporting for GitHub Actions

The summary is markdown appended to the job summary file when running
inside Actions, and logged otherwise.
"""

import logging
import sys

logger = logging.getLogger(__name__)


class RunSummary:
    def __init__(self, summary_path=None):
        self.summary_path = summary_path
        self.lines = []

    def add_link(self, text, url):
        self.lines.append(f"[{text}]({url})")

    def add_raw(self, text):
        self.lines.append(text)

    def field_set(self, assignment):
        self.add_raw(f'Setting field "{assignment.field}" to "{assignment.option}"')

    def stringify(self):
        return "\n\n".join(self.lines) + "\n" if self.lines else ""

    def write(self):
        """Append the summary to the job summary file, or log it when there is none"""
        text = self.stringify()
        if not self.summary_path:
            logger.info(f'Summary details (skipping output): "{text.strip()}"')
            return
        with open(self.summary_path, "a", encoding="utf-8") as f:
            f.write(text)


def _escape_command_data(message):
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def report_failure(message, stream=None):
    """Mark the workflow step as failed with an error annotation"""
    logger.error(message)
    print(f"::error::{_escape_command_data(str(message))}", file=stream or sys.stdout)
