"""Exception hierarchy for the I/O adapters around the analysis core.

The analysis core itself never raises on malformed input; these errors
belong to archive handling, storage and configuration.
"""


class QkviewDoctorError(Exception):
    """Base class for all qkview-doctor errors."""


class ArchiveError(QkviewDoctorError):
    """The qkview archive could not be read or has an unexpected layout."""


class StorageError(QkviewDoctorError):
    """A storage backend failed to fetch an object."""


class ConfigurationError(QkviewDoctorError):
    """Settings are invalid or a required collaborator is missing."""
