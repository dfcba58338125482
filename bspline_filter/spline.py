import logging
from dataclasses import InitVar, dataclass, field

import numpy as np

from .banded import solve_banded_lu
from .design import design_matrix
from .domain import SplineDomain

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class BSpline:
    """
    Smoothed curve for one response vector over a `SplineDomain`.

    The spline owns its coefficients and curve cache; the domain is only
    read. If the domain is not ok the spline is empty and every query
    returns a sentinel (0 or an empty array) instead of raising.

    Parameters
    ----------
    domain : SplineDomain
        The configured domain.
    y : np.ndarray
        Response values, one per sample of the domain.

    Raises
    ------
    ValueError
        If `y` does not have one value per sample.
    FitError
        If solving the factored system fails for `y`.
    """
    domain: SplineDomain
    y: InitVar[np.ndarray]
    ok_: bool = field(init=False, default=False)
    mean: float = field(init=False, default=0.0)
    _A: np.ndarray = field(init=False, default=None, repr=False)
    _curve: np.ndarray = field(init=False, default=None, repr=False)

    def __post_init__(self, y):
        log = self.domain.logger or logger
        if not self.domain.ok_:
            log.warning("Domain is not ready, the spline will be empty: %s",
                        self.domain.error_)
            return

        y = np.asarray(y, dtype=float)
        nx = len(self.domain.x)
        if y.shape != (nx,):
            raise ValueError(
                f"Expected {nx} response values, got shape {y.shape}.")

        log.debug("Solving for B...")
        self.mean = float(y.mean())
        log.debug("Mean for y: %g", self.mean)
        B = self.domain.N_.T @ (y - self.mean)
        self._A = solve_banded_lu(self.domain.lu_, B)
        log.debug("Done.")
        self.ok_ = True

    @property
    def coefficients_(self):
        if not self.ok_:
            return np.empty(0)
        return self._A.copy()

    def coefficient(self, n):
        """
        Coefficient of node `n`, or 0 if `n` is out of range or the spline is empty.
        """
        if self.ok_ and 0 <= n <= self.domain.M:
            return float(self._A[n])
        return 0.0

    def evaluate(self, x):
        """
        Value of the smoothed curve at `x`.

        Parameters
        ----------
        x : float or np.ndarray
            Abscissae. Points more than two node intervals outside the
            domain evaluate to the mean.

        Returns
        -------
        float or np.ndarray
            Zero everywhere if the spline is empty.
        """
        if not self.ok_:
            return 0.0 if np.ndim(x) == 0 else np.zeros(np.shape(x))
        N = design_matrix(self.domain.grid_, self.domain.boundary, np.ravel(x))
        y = N @ self._A + self.mean
        if np.ndim(x) == 0:
            return float(y[0])
        return y.reshape(np.shape(x))

    def curve(self):
        """
        The curve evaluated at `domain.nodes()`, computed once and cached.

        Returns an empty array if the spline is empty. Call once before
        sharing the spline between threads.
        """
        if not self.ok_:
            return np.empty(0)
        if self._curve is None:
            self._curve = self.evaluate(self.domain.nodes())
        return self._curve


def fit(domain, y):
    """
    Fit the response `y` over `domain`, reusing its factorization.
    """
    return BSpline(domain, y)
