import logging
from dataclasses import dataclass

import numpy as np

from .errors import ConfigError

logger = logging.getLogger(__name__)

# Grid search policy
INITIAL_INTERVALS = 9
MIN_NODES_PER_WAVELENGTH = 2.0
TARGET_NODES_PER_WAVELENGTH = 4.0
MAX_NODES_PER_WAVELENGTH = 15.0
MAX_POINTS_PER_INTERVAL = 2.0


@dataclass(frozen=True)
class NodeGrid:
    """
    Evenly spaced nodes 0..M covering [xmin, xmax] with spacing `dx`.

    The two ghost nodes -1 and M+1 sit one interval outside the domain and
    are only used through `basis.kernel`.
    """
    xmin: float
    xmax: float
    M: int
    dx: float

    def __post_init__(self):
        assert self.M >= 1 and self.dx > 0

    @property
    def n_nodes(self):
        return self.M + 1

    @property
    def left_ghost(self):
        return -1

    @property
    def right_ghost(self):
        return self.M + 1

    def node_positions(self):
        return self.xmin + np.arange(self.M + 1) * self.dx


def _ratios(ni, span, wavelength, nx):
    deltax = span / ni
    ratiof = deltax / wavelength
    ratiod = nx / (ni + 1)
    return deltax, ratiof, ratiod


def plan_grid(x, wavelength, log=None):
    """
    Choose the number of node intervals M and the spacing for samples `x`.

    With `wavelength == 0` there is one interval per sample. Otherwise the
    number of intervals `ni` grows from 10, tracking
    ``ratiof = (span / ni) / wavelength`` and ``ratiod = nx / (ni + 1)``.
    The coarse phase stops once ``ratiof <= 2``; the refinement phase keeps
    growing while ``ratiof < 4`` or ``ratiod > 2``. Refinement steps back one
    interval and stops as soon as ``ratiod < 1`` or ``ratiof > 15``.

    Parameters
    ----------
    x : np.ndarray
        The sample abscissae.
    wavelength : float
        The cutoff wavelength, in the units of `x`.

    Returns
    -------
    NodeGrid

    Raises
    ------
    ConfigError
        If the wavelength exceeds the span of `x`, the span is empty, or the
        samples are too sparse for the wavelength.
    """
    log = log or logger
    x = np.asarray(x, dtype=float)
    nx = len(x)
    xmin, xmax = float(x.min()), float(x.max())
    span = xmax - xmin

    if wavelength > span:
        raise ConfigError(
            f"Wavelength {wavelength} exceeds the domain span {span}.")
    if span <= 0:
        raise ConfigError("All samples share one abscissa; the domain is empty.")

    if wavelength == 0:
        ni = nx
        deltax = span / nx
    else:
        ni = INITIAL_INTERVALS
        while True:
            ni += 1
            deltax, ratiof, ratiod = _ratios(ni, span, wavelength, nx)
            if ratiod < 1.0:
                raise ConfigError(
                    f"{nx} samples are too sparse for wavelength {wavelength}.")
            if ratiof <= MIN_NODES_PER_WAVELENGTH:
                break
        log.debug("Coarse search stopped at %d intervals (ratiof=%g)", ni, ratiof)

        while True:
            ni += 1
            deltax, ratiof, ratiod = _ratios(ni, span, wavelength, nx)
            if ratiod < 1.0 or ratiof > MAX_NODES_PER_WAVELENGTH:
                ni -= 1
                deltax, ratiof, ratiod = _ratios(ni, span, wavelength, nx)
                break
            if not (ratiof < TARGET_NODES_PER_WAVELENGTH
                    or ratiod > MAX_POINTS_PER_INTERVAL):
                break

    log.debug("Using M node intervals: %d of length DX: %g", ni, deltax)
    return NodeGrid(xmin=xmin, xmax=xmax, M=ni, dx=deltax)
