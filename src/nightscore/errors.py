class NightScoreError(Exception):
    """Base class for every error raised by the pipeline or its sources."""


class PermissionDenied(NightScoreError):
    """Authorization to read sleep samples was not granted."""


class DataUnavailable(NightScoreError):
    """The health data source has no data capability at all."""


class NoSamplesInRange(NightScoreError):
    """The query succeeded but returned nothing. Treated as an empty result."""


class ComputeFailure(NightScoreError):
    """An interval violated the end >= start invariant during a pipeline run."""
