from dataclasses import dataclass, field

import numpy as np
from sklearn.base import BaseEstimator

from .boundary import BoundaryCondition
from .domain import SplineDomain, configure
from .spline import BSpline


@dataclass
class BSplineFilter(BaseEstimator):
    """
    Band-limited smoothing spline estimator.

    Fits a cubic B-spline on an evenly spaced node grid to noisy samples,
    penalizing variation on scales shorter than a cutoff wavelength. The
    grid resolution is chosen from the sample density and the wavelength.

    Parameters
    ----------
    wavelength : float, optional
        Cutoff wavelength in the units of `x`. Zero disables the penalty and
        gives a plain least-squares fit with one node interval per sample.
    boundary : BoundaryCondition or int, optional
        Constraint at both ends of the domain: zero value relative to the
        mean (0), zero slope (1) or zero curvature (2).

    Attributes
    ----------
    domain_ : SplineDomain
        The configured domain, reused by `smooth`.
    spline_ : BSpline
        The most recent fit.
    """
    wavelength: float = 0.0
    boundary: BoundaryCondition = BoundaryCondition.ZERO_ENDPOINTS
    domain_: SplineDomain = field(init=False, repr=False)
    spline_: BSpline = field(init=False, repr=False)

    def fit(self, x, y):
        """
        Configure the domain for `x` and fit `y`.

        Raises
        ------
        ConfigError
            If `x` and `wavelength` do not give a usable domain.
        """
        self.domain_ = configure(x,
                                 wavelength=self.wavelength,
                                 boundary=self.boundary)
        self.spline_ = self.domain_.apply(y)
        return self

    def smooth(self, y):
        """
        Fit a new response over the abscissae given to `fit`.
        """
        self.spline_ = self.domain_.apply(y)
        return self

    def predict(self, x):
        """
        Evaluate the fitted spline.

        Parameters
        ----------
        x : np.ndarray
            The predictor variables.

        Returns
        -------
        np.ndarray
            The smoothed response.
        """
        return self.spline_.evaluate(np.asarray(x, dtype=float))

    @property
    def coef_(self):
        return self.spline_.coefficients_

    @property
    def intercept_(self):
        return self.spline_.mean
