import logging
from dataclasses import dataclass, field

import numpy as np

from .banded import factor_banded
from .boundary import BoundaryCondition, validate_boundary
from .design import add_p, design_matrix
from .errors import ConfigError, FactorizationError
from .grid import plan_grid
from .penalty import alpha_for, calculate_q

logger = logging.getLogger(__name__)

# Matrices larger than this are not dumped to the debug log.
MAX_DUMP_NODES = 30


@dataclass(eq=False)
class SplineDomain:
    """
    Node grid, penalty and factored system matrix for one set of abscissae.

    Construction runs the whole setup phase: grid planning, the roughness
    penalty, the data-fit term and the banded LU factorization. Failures do
    not raise; they leave `ok_` False and store the exception on `error_`.
    Use `configure` for a constructor that raises instead.

    Between calls to `set_domain` the domain is read-only and can be shared
    by any number of fitted splines. The node positions are cached on first
    use of `nodes`; call it once before sharing a domain between threads.

    Parameters
    ----------
    x : np.ndarray
        The sample abscissae, in any order.
    wavelength : float, optional
        Cutoff wavelength in the units of `x`. Variation on shorter scales
        is penalized. Zero disables the penalty.
    boundary : BoundaryCondition or int, optional
        Constraint at both ends of the domain.
    logger : logging.Logger, optional
        Receives the setup diagnostics. Defaults to the module logger.
    """
    x: np.ndarray
    wavelength: float = 0.0
    boundary: BoundaryCondition = BoundaryCondition.ZERO_ENDPOINTS
    logger: logging.Logger = field(default=None, repr=False)

    # Derivative order of the roughness constraint
    order: int = field(init=False, default=1)

    ok_: bool = field(init=False, default=False)
    error_: Exception = field(init=False, default=None, repr=False)
    grid_: object = field(init=False, default=None)
    alpha_: float = field(init=False, default=None)
    Q_: object = field(init=False, default=None, repr=False)
    N_: object = field(init=False, default=None, repr=False)
    lu_: object = field(init=False, default=None, repr=False)
    _nodes: np.ndarray = field(init=False, default=None, repr=False)

    def __post_init__(self):
        if self.logger is None:
            self.logger = logger
        self.set_domain(self.x, self.wavelength, self.boundary)

    def set_domain(self, x, wavelength=0.0,
                   boundary=BoundaryCondition.ZERO_ENDPOINTS):
        """
        Replace the samples, wavelength and boundary type and rerun setup.

        Everything derived from the previous configuration, including the
        cached node positions, is discarded first. Assign through this
        method rather than to the attributes directly.

        Returns
        -------
        bool
            The new value of `ok_`.
        """
        self.x = x
        self.wavelength = wavelength
        self.boundary = boundary
        self.ok_ = False
        self.error_ = None
        self.grid_ = self.alpha_ = None
        self.Q_ = self.N_ = self.lu_ = None
        self._nodes = None
        try:
            self._validate()
            self._setup()
        except (ConfigError, FactorizationError) as e:
            self.error_ = e
            self.logger.debug("Domain setup failed: %s", e)
        else:
            self.ok_ = True
        return self.ok_

    def _validate(self):
        if self.x is None:
            raise ConfigError("No samples given.")
        try:
            x = np.array(self.x, dtype=float)
        except (TypeError, ValueError) as e:
            raise ConfigError("Samples must be numeric.") from e
        if x.ndim != 1 or len(x) == 0:
            raise ConfigError(
                f"Samples must be a non-empty 1-d sequence, got shape {x.shape}.")
        if not np.all(np.isfinite(x)):
            raise ConfigError("Samples must be finite.")

        try:
            wavelength = float(self.wavelength)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid wavelength {self.wavelength!r}.") from e
        if not np.isfinite(wavelength) or wavelength < 0:
            raise ConfigError(
                f"Wavelength must be finite and non-negative, got {wavelength}.")

        self.boundary = validate_boundary(self.boundary)
        self.x = x
        self.wavelength = wavelength

    def _setup(self):
        log = self.logger
        self.grid_ = plan_grid(self.x, self.wavelength, log=log)

        self.alpha_ = alpha_for(self.wavelength, self.order)
        log.debug("Alpha: %g", self.alpha_)

        log.debug("Calculating Q...")
        self.Q_ = calculate_q(self.grid_, self.alpha_, self.boundary)
        self._dump("Q", self.Q_)

        log.debug("Calculating P...")
        self.N_ = design_matrix(self.grid_, self.boundary, self.x)
        add_p(self.Q_, self.N_)
        self._dump("Q after addition of P", self.Q_)

        log.debug("Beginning LU factoring of P+Q...")
        try:
            self.lu_ = factor_banded(self.Q_)
        except FactorizationError:
            log.debug("Factoring failed.")
            raise
        log.debug("Done.")

    def _dump(self, label, matrix):
        if self.grid_.M < MAX_DUMP_NODES and self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug("%s:\n%s", label,
                              np.array2string(matrix.todense(), precision=2))

    @property
    def M(self):
        return self.grid_.M if self.grid_ is not None else 0

    @property
    def n_nodes(self):
        return self.M + 1 if self.grid_ is not None else 0

    @property
    def dx(self):
        return self.grid_.dx if self.grid_ is not None else 0.0

    @property
    def xmin(self):
        return self.grid_.xmin if self.grid_ is not None else None

    @property
    def xmax(self):
        return self.grid_.xmax if self.grid_ is not None else None

    def nodes(self):
        """
        Positions of the nodes 0..M, or an empty array if no grid was planned.
        """
        if self.grid_ is None:
            return np.empty(0)
        if self._nodes is None:
            self._nodes = self.grid_.node_positions()
        return self._nodes

    def apply(self, y):
        """
        Fit the response `y`, one value per sample, reusing the factorization.

        Returns
        -------
        BSpline
        """
        from .spline import BSpline
        return BSpline(self, y)

    def copy(self):
        """
        Independent copy: samples, matrices, factors and caches are duplicated.
        """
        new = object.__new__(type(self))
        new.__dict__.update(self.__dict__)
        for name in ('x', 'Q_', 'N_', '_nodes'):
            value = getattr(self, name)
            if value is not None and hasattr(value, 'copy'):
                setattr(new, name, value.copy())
        if self.lu_ is not None:
            new.lu_ = type(self.lu_)(lu=self.lu_.lu.copy(),
                                     pivots=self.lu_.pivots.copy(),
                                     bandwidth=self.lu_.bandwidth)
        return new

    def __copy__(self):
        return self.copy()

    def __deepcopy__(self, memo):
        return self.copy()


def configure(x, wavelength=0.0, boundary=BoundaryCondition.ZERO_ENDPOINTS,
              logger=None):
    """
    Build a `SplineDomain`, raising if it cannot be used for fitting.

    Raises
    ------
    ConfigError
        For invalid samples, wavelength or boundary type, or samples too
        sparse for the wavelength.
    FactorizationError
        If the combined system matrix is singular.
    """
    domain = SplineDomain(x, wavelength=wavelength, boundary=boundary,
                          logger=logger)
    if not domain.ok_:
        raise domain.error_
    return domain
