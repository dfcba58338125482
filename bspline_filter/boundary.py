from enum import IntEnum

import numpy as np

from .errors import ConfigError


class BoundaryCondition(IntEnum):
    """
    Constraint applied at both ends of the domain by coupling the two edge
    basis functions on each side to a ghost node just outside the domain.
    """
    ZERO_ENDPOINTS = 0
    ZERO_FIRST = 1
    ZERO_SECOND = 2


# Rows are boundary types; columns are nodes 0, 1, M-1 and M.
BOUNDARY_TABLE = np.array([
    [-4.0, -1.0, -1.0, -4.0],
    [0.0, 1.0, 1.0, 0.0],
    [2.0, -1.0, -1.0, 2.0],
])


def validate_boundary(bc):
    """
    Coerce `bc` to a BoundaryCondition, raising ConfigError if it is not one.
    """
    try:
        code = int(bc)
        if code != bc:
            raise ValueError(bc)
        return BoundaryCondition(code)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Unknown boundary condition type: {bc!r}") from e


def beta(bc, m, M):
    """
    Weight of the ghost node added to the basis function at node `m`.

    Zero for interior nodes (1 < m < M-1). Edge nodes near M are remapped
    to table offsets 2 and 3.
    """
    if 1 < m < M - 1:
        return 0.0
    if m >= M - 1:
        m -= M - 3
    assert 0 <= bc <= 2
    assert 0 <= m <= 3
    return float(BOUNDARY_TABLE[bc, m])
