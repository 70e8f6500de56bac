"""Error kinds raised by metrics."""


class MetricError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(MetricError, ValueError):
    """Invalid construction parameters or an input encoding that cannot be read.

    Raised for a non-positive class count, an unknown averaging policy,
    a class axis whose length is neither 1 nor ``num_classes``, or
    class ids outside ``[0, num_classes)``.
    """


class ShapeMismatchError(MetricError, ValueError):
    """Predictions and labels carry a different number of observations."""
