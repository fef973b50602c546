"""
label_sync package for syncing GitHub Project fields from issue labels

This package provides modules for reading the label mapping CSV,
resolving GitHub Project (v2) metadata, and setting single-select
field values on an issue's project item.
"""

__version__ = "1.0.0"

# Import all modules
from . import auth
from . import client
from . import config
from . import errors
from . import summary
from . import table
from . import updater
