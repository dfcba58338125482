import numpy as np
from scipy import sparse

from .basis import basis, edge_weights

WINDOW = np.arange(-2, 3)


def design_matrix(grid, bc, x):
    """
    Sparse matrix `N` with ``N[k, m] = basis(m, x[k])``.

    Only the five nodes around the interval holding each abscissa are
    evaluated; every other basis function vanishes there.

    Parameters
    ----------
    grid : NodeGrid
        The node grid.
    bc : BoundaryCondition
        Boundary condition type of the basis.
    x : np.ndarray
        Abscissae, inside or outside the domain.

    Returns
    -------
    scipy.sparse.csr_matrix
        Shape ``(len(x), M + 1)``.
    """
    x = np.atleast_1d(np.asarray(x, dtype=float))
    weights = edge_weights(grid, bc)
    # Abscissae outside the domain still see the edge nodes through the ghosts.
    m0 = np.clip(np.floor((x - grid.xmin) / grid.dx), 0, grid.M).astype(int)

    rows = np.repeat(np.arange(len(x)), len(WINDOW))
    cols = (m0[:, None] + WINDOW[None, :]).ravel()
    keep = (cols >= 0) & (cols <= grid.M)
    rows, cols = rows[keep], cols[keep]
    vals = basis(grid, bc, cols, x[rows], weights=weights)

    N = sparse.coo_matrix((vals, (rows, cols)),
                          shape=(len(x), grid.M + 1)).tocsr()
    N.eliminate_zeros()
    return N


def add_p(Q, N):
    """
    Add the normal-equations matrix ``N.T @ N`` into the banded matrix `Q`.

    Only the upper triangle of the product is read and each value is added
    to both mirrored entries, so a symmetric `Q` stays exactly symmetric.
    Products of basis functions more than `Q.bandwidth` nodes apart are
    dropped; they only arise from rounding when a sample sits on a node.
    """
    P = (N.T @ N).tocoo()
    keep = (P.row <= P.col) & (P.col - P.row <= Q.bandwidth)
    rows, cols, vals = P.row[keep], P.col[keep], P.data[keep]

    Q.add_at(rows, cols, vals)
    off = rows != cols
    Q.add_at(cols[off], rows[off], vals[off])
    return Q
