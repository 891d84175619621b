"""Error and warning taxonomy for the bivariate choropleth pipeline.

Per-region defects (bad geometry, bad demographic value) are raised by the
validators but caught by the aggregator, which excludes the region and
reports it. ``UnknownClassError`` signals a broken binning/classification
contract and is never caught inside the pipeline.
"""


class BivariateMapError(Exception):
    """Base class for all pipeline errors."""


class InvalidGeometryError(BivariateMapError):
    """Region has no boundary or a missing/non-positive area."""


class InvalidDemographicValueError(BivariateMapError):
    """Region demographic value is missing, negative or not finite."""


class UnknownClassError(BivariateMapError, ValueError):
    """Class index or bivariate label outside the fixed 3x3 enumeration."""


class SkippedRegionWarning(UserWarning):
    """A region was excluded from aggregation."""


class DegenerateDistributionWarning(UserWarning):
    """A distribution had fewer than 3 distinct values when binned."""


class MalformedRecordWarning(UserWarning):
    """Input records were unreadable or had out-of-range coordinates."""
