from dataclasses import dataclass

import numpy as np
from scipy import sparse
from scipy.linalg import get_lapack_funcs

from .errors import FactorizationError, FitError


class BandedMatrix:
    """
    Square matrix whose nonzero entries lie within `bandwidth` of the diagonal.

    Entries are kept in the ``(2 * bandwidth + 1, n)`` layout used by
    :func:`scipy.linalg.solve_banded`: ``data[bandwidth + i - j, j] == a[i, j]``.
    Reading outside the band gives 0; writing a nonzero value there raises
    IndexError.
    """

    def __init__(self, n, bandwidth=3):
        self.n = n
        self.bandwidth = bandwidth
        self.data = np.zeros((2 * bandwidth + 1, n))

    @property
    def shape(self):
        return (self.n, self.n)

    def _row(self, i, j):
        if not (0 <= i < self.n and 0 <= j < self.n):
            raise IndexError(f"Index ({i}, {j}) out of range for shape {self.shape}")
        if abs(i - j) > self.bandwidth:
            return None
        return self.bandwidth + i - j

    def __getitem__(self, key):
        i, j = key
        r = self._row(i, j)
        if r is None:
            return 0.0
        return self.data[r, j]

    def __setitem__(self, key, value):
        i, j = key
        r = self._row(i, j)
        if r is None:
            if value != 0:
                raise IndexError(f"Index ({i}, {j}) lies outside the band")
            return
        self.data[r, j] = value

    def add_at(self, rows, cols, values):
        """
        Unbuffered ``a[rows, cols] += values``; repeated indices accumulate.
        """
        rows = np.asarray(rows)
        cols = np.asarray(cols)
        assert np.all(np.abs(rows - cols) <= self.bandwidth)
        np.add.at(self.data, (self.bandwidth + rows - cols, cols), values)

    def copy(self):
        new = BandedMatrix(self.n, self.bandwidth)
        new.data = self.data.copy()
        return new

    def tosparse(self):
        offsets = self.bandwidth - np.arange(2 * self.bandwidth + 1)
        return sparse.dia_matrix((self.data, offsets), shape=self.shape)

    def todense(self):
        return self.tosparse().toarray()

    def is_symmetric(self):
        dense = self.todense()
        return bool(np.array_equal(dense, dense.T))

    def __repr__(self):
        return f"BandedMatrix(n={self.n}, bandwidth={self.bandwidth})"


@dataclass
class BandedLU:
    """
    LU factors of a banded matrix in the layout produced by LAPACK ``?gbtrf``.
    """
    lu: np.ndarray
    pivots: np.ndarray
    bandwidth: int

    def solve(self, rhs):
        return solve_banded_lu(self, rhs)


def factor_banded(matrix):
    """
    LU-factorize a `BandedMatrix` with partial pivoting.

    The band is copied into a fresh work array with `bandwidth` extra rows
    for fill-in, so `matrix` is left untouched.

    Raises
    ------
    FactorizationError
        If the matrix is exactly singular or the factors are not finite.
    """
    n = matrix.n
    k = min(matrix.bandwidth, n - 1)
    u = matrix.bandwidth
    ab = np.zeros((3 * k + 1, n))
    ab[k:, :] = matrix.data[u - k:u + k + 1]

    gbtrf, = get_lapack_funcs(('gbtrf',), (ab,))
    lu, pivots, info = gbtrf(ab=ab, kl=k, ku=k)
    if info != 0:
        raise FactorizationError(
            f"Could not LU-factorize banded matrix! Got {info = }.")
    if not np.all(np.isfinite(lu)):
        raise FactorizationError("LU factors of banded matrix are not finite.")
    return BandedLU(lu=lu, pivots=pivots, bandwidth=k)


def solve_banded_lu(factors, rhs):
    """
    Solve ``a @ x = rhs`` given `factors` from `factor_banded`.

    Raises
    ------
    FitError
        If LAPACK ``?gbtrs`` reports an error or the solution is not finite.
    """
    rhs = np.asarray(rhs, dtype=float)
    gbtrs, = get_lapack_funcs(('gbtrs',), (factors.lu,))
    x, info = gbtrs(factors.lu, factors.bandwidth, factors.bandwidth,
                    rhs, factors.pivots)
    if info != 0:
        raise FitError(f"Banded LU solve failed! Got {info = }.")
    if not np.all(np.isfinite(x)):
        raise FitError("Banded LU solve produced non-finite coefficients.")
    return x
