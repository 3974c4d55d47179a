"""
Exceptions and warnings raised by FastRegrid.

Every error is fatal to the regrid in progress. Diagnostics that do not
change results are issued as :class:`RegridWarning`.
"""


class FastRegridError(Exception):
    """Base class for all FastRegrid errors."""


class InvalidArgumentError(FastRegridError, ValueError):
    """A configuration value, coordinate or enumerator is out of range."""


class EmptyInputError(FastRegridError, ValueError):
    """A source or target point set is empty."""


class LayoutMismatchError(FastRegridError, ValueError):
    """Column layout of an input is inconsistent with the configured layout."""


class NoSourceForTargetError(FastRegridError, RuntimeError):
    """No neighbour could be found for a target point, even after fallback."""

    def __init__(self, longitude: float, latitude: float):
        self.longitude = longitude
        self.latitude = latitude
        super().__init__(
            f"No valid source points found for target ({longitude}, {latitude})"
        )


class NoInterpolationError(FastRegridError, RuntimeError):
    """Interpolation produced no output records."""


class RegridWarning(UserWarning):
    """Verbose diagnostic emitted while mapping or interpolating."""
