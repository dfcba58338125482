"""
Band-limited cubic B-spline smoothing of one-dimensional samples.
"""
import logging

from .banded import BandedMatrix, BandedLU, factor_banded, solve_banded_lu
from .basis import basis, kernel
from .boundary import BoundaryCondition, beta
from .domain import SplineDomain, configure
from .errors import BSplineError, ConfigError, FactorizationError, FitError
from .estimator import BSplineFilter
from .grid import NodeGrid, plan_grid
from .penalty import alpha_for, calculate_q, q_delta
from .spline import BSpline, fit

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
