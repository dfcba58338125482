import numpy as np

from .banded import BandedMatrix
from .boundary import beta

BANDWIDTH = 3

# Integrals of the product of first derivatives of two normalized kernels
# `d` nodes apart (row d), over each of the four unit intervals -2..1
# relative to the lower node (columns).
QPARTS = np.array([
    [0.11250, 0.63750, 0.63750, 0.11250],
    [0.00000, 0.13125, -0.54375, 0.13125],
    [0.00000, 0.00000, -0.22500, -0.22500],
    [0.00000, 0.00000, 0.00000, -0.01875],
])


def alpha_for(wavelength, order=1):
    """
    Roughness weight for a cutoff `wavelength` and derivative `order`.

    ``alpha = (wavelength / 2 pi) ** (2 * order)``; a zero wavelength gives
    zero weight and turns the penalty off.
    """
    if order not in (1, 2, 3):
        raise ValueError(f"Derivative order must be 1, 2 or 3, got {order}.")
    a = wavelength / (2 * np.pi)
    return float(a ** (2 * order))


def q_delta(grid, alpha, m1, m2):
    """
    Penalty integral between the kernels of nodes `m1` and `m2`.

    The integral is restricted to the node domain [0, M], so the unit
    intervals outside it are dropped. Ghost nodes -1 and M+1 are accepted.
    """
    if m1 > m2:
        m1, m2 = m2, m1
    if m2 - m1 > 3:
        return 0.0

    q = 0.0
    for m in range(max(m1 - 2, 0), min(m1 + 2, grid.M)):
        q += QPARTS[m2 - m1, m - m1 + 2]
    return float(q * grid.dx * alpha)


def calculate_q(grid, alpha, bc):
    """
    Assemble the banded roughness penalty matrix.

    Parameters
    ----------
    grid : NodeGrid
        The node grid.
    alpha : float
        The roughness weight; zero yields an all-zero matrix.
    bc : BoundaryCondition
        Selects the ghost-node weights used for the corner corrections.

    Returns
    -------
    BandedMatrix
        Symmetric (M+1) x (M+1) matrix with half-bandwidth 3.
    """
    M = grid.M
    Q = BandedMatrix(M + 1, BANDWIDTH)
    if alpha == 0:
        return Q

    for i in range(M + 1):
        Q[i, i] = q_delta(grid, alpha, i, i)
        for j in range(1, BANDWIDTH + 1):
            if i + j > M:
                break
            Q[i, i + j] = Q[i + j, i] = q_delta(grid, alpha, i, i + j)

    def correct(i, j, ghost):
        b1 = beta(bc, i, M)
        b2 = beta(bc, j, M)
        q = (b2 * q_delta(grid, alpha, ghost, i)
             + b1 * q_delta(grid, alpha, ghost, j)
             + b1 * b2 * q_delta(grid, alpha, ghost, ghost))
        Q[i, j] = Q[i, j] + q
        if i != j:
            Q[j, i] = Q[i, j]

    # Upper left corner
    for i in range(0, 2):
        for j in range(i, min(i + 4, M + 1)):
            correct(i, j, grid.left_ghost)

    # Lower right corner
    for i in range(M - 1, M + 1):
        for j in range(max(i - 3, 0), i + 1):
            correct(i, j, grid.right_ghost)

    return Q
