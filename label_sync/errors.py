"""
errors.py - Error types raised while syncing project fields

Every error aborts the run. The message names the field, option,
label or resource at fault.
"""


class LabelSyncError(Exception):
    """Base class for all run-ending errors"""


class ConfigError(LabelSyncError):
    """Missing or contradictory configuration, or a CSV/project schema mismatch"""


class FileReadError(LabelSyncError):
    """The CSV file does not exist or cannot be read"""


class ParseError(LabelSyncError):
    """The CSV file is not well-formed delimited text"""


class AuthError(LabelSyncError):
    """Credentials could not be resolved or were rejected"""


class NotFoundError(LabelSyncError):
    """Organization, repository, issue or project does not exist"""


class TransientError(LabelSyncError):
    """Network or service failure during an API call"""
