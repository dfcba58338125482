import numpy as np


class BSplineError(Exception):
    """
    Base class for errors raised by bspline_filter.
    """


class ConfigError(BSplineError, ValueError):
    """
    The samples, wavelength or boundary type cannot produce a usable domain.
    """


class FactorizationError(BSplineError, np.linalg.LinAlgError):
    """
    The combined penalty and data-fit matrix could not be LU-factorized.
    """


class FitError(BSplineError, RuntimeError):
    """
    Solving the factored system failed for one data vector.
    """
