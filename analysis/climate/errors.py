"""
Exception types raised by the climate analysis core.

Data gaps (days or windows with no valid readings) are NOT errors; they are
represented as missing values and skipped. Only structurally broken input
raises.
"""


class ClimateError(Exception):
    """Base class for all climate analysis errors."""


class DataError(ClimateError, ValueError):
    """Input series violates an ingestion invariant.

    Raised for unparsable timestamps and duplicate station-hour entries.
    """


class IngestionError(DataError):
    """A raw row could not be turned into an Observation.

    Raised by the ingestion collaborator for malformed fixed-width rows.
    Aborts the run: no partial dataset is analyzed.
    """
