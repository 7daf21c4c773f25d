"""
Core implementation of :mod:`arbiter.errors`
"""

from pytools.api import AllTracker

__all__ = [
    "ArbiterError",
    "ConfigurationError",
    "InvalidInputError",
    "NotTrainedError",
]


#
# Ensure all symbols introduced below are included in __all__
#

__tracker = AllTracker(globals())


#
# Class definitions
#


class ArbiterError(Exception):
    """
    Base class of all errors raised by arbiter.
    """


class ConfigurationError(ArbiterError, ValueError):
    """
    Raised when an estimator is constructed with invalid arguments.
    """


class InvalidInputError(ArbiterError, ValueError):
    """
    Raised when an estimator is trained or scored on a dataset it cannot handle,
    e.g., an unlabeled dataset passed to a supervised estimator.
    """


class NotTrainedError(ArbiterError, RuntimeError):
    """
    Raised when an estimator is used for inference before it has been trained.
    """


__tracker.validate()
