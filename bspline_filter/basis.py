import numpy as np

from .boundary import beta


def _as_output(y, x, m=None):
    if np.ndim(x) == 0 and np.ndim(m) == 0:
        return float(y)
    return y


def kernel(grid, m, x):
    """
    Evaluate the normalized cubic B-spline kernel centred on node `m`.

    This is the extended-domain mode: `m` may be any node in ``[-1, M+1]``,
    including the two ghost nodes, and no boundary correction is applied.
    The kernel is 1 at its own node, 1/4 one node away and vanishes two
    nodes away.

    Parameters
    ----------
    grid : NodeGrid
        The node grid.
    m : int or np.ndarray
        Node index or indices.
    x : float or np.ndarray
        Abscissae, broadcast against `m`.

    Returns
    -------
    float or np.ndarray
    """
    m = np.asarray(m)
    assert np.all((m >= grid.left_ghost) & (m <= grid.right_ghost))
    xm = grid.xmin + m * grid.dx
    z = np.abs((np.asarray(x, dtype=float) - xm) / grid.dx)
    zp = 2.0 - z
    y = 0.25 * zp ** 3 - np.clip(zp - 1.0, 0.0, None) ** 3
    y = np.where(z < 2.0, y, 0.0)
    return _as_output(y, x, m)


def edge_weights(grid, bc):
    """
    Ghost-node weights `beta(m)` for every real node 0..M.
    """
    weights = np.zeros(grid.M + 1)
    for m in sorted({0, 1, grid.M - 1, grid.M}):
        if 0 <= m <= grid.M:
            weights[m] = beta(int(bc), m, grid.M)
    return weights


def basis(grid, bc, m, x, weights=None):
    """
    Evaluate the boundary-corrected basis function of node `m` at `x`.

    Nodes 0 and 1 add `beta(m)` times the kernel of the left ghost node,
    nodes M-1 and M add `beta(m)` times the kernel of the right ghost node.
    Both `m` and `x` may be arrays; they are broadcast together.

    Raises
    ------
    IndexError
        If any `m` lies outside ``[0, M]``. Ghost nodes are only reachable
        through `kernel`.
    """
    m_arr = np.asarray(m)
    if np.any((m_arr < 0) | (m_arr > grid.M)):
        raise IndexError(f"Node index outside [0, {grid.M}]: {m!r}")
    if weights is None:
        weights = edge_weights(grid, bc)

    left = (m_arr == 0) | (m_arr == 1)
    right = ~left & ((m_arr == grid.M - 1) | (m_arr == grid.M))
    w = weights[m_arr]

    y = kernel(grid, m_arr, x)
    y = y + np.where(left, w * kernel(grid, grid.left_ghost, x), 0.0)
    y = y + np.where(right, w * kernel(grid, grid.right_ghost, x), 0.0)
    return _as_output(y, x, m)
