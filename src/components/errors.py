"""Exception hierarchy for Text-to-SQL Explorer.

Every exception here is caught at a session handler boundary and turned
into a message for the UI; none of them is meant to escape to Gradio.
"""

from typing import Optional


class ExplorerError(Exception):
    """Base class for application errors"""


# ----------------------------------------------------------------------
# Data source loading
# ----------------------------------------------------------------------


class DataSourceError(ExplorerError):
    """A data source could not be loaded"""


class DatabaseInitError(DataSourceError):
    """The embedded engine could not be initialized"""


class InvalidDatabaseFileError(DataSourceError):
    """The buffer is not a readable SQLite database"""


class EmptyDatabaseError(DataSourceError):
    """The database opened but contains no user tables"""


class RemoteFetchError(DataSourceError):
    """Fetching a database from a URL failed"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


# ----------------------------------------------------------------------
# SQL generation
# ----------------------------------------------------------------------


class GenerationError(ExplorerError):
    """The language model produced no usable SQL"""


class MissingCredentialError(GenerationError):
    """No API key is configured for the language model service"""
