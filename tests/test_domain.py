import copy
import logging

import numpy as np
import pytest

from bspline_filter import (BoundaryCondition, BSplineFilter, ConfigError,
                            FactorizationError, SplineDomain, configure)
from bspline_filter.basis import basis
from bspline_filter.penalty import calculate_q


def dense_design(domain):
    grid = domain.grid_
    return np.array([[basis(grid, domain.boundary, m, xk)
                      for m in range(grid.M + 1)] for xk in domain.x])


def test_zero_wavelength_grid():
    x = np.arange(10.0)
    domain = SplineDomain(x, wavelength=0.0, boundary=0)
    assert domain.M == 10
    assert domain.n_nodes == 11
    assert domain.dx == 9.0 / 10
    nodes = domain.nodes()
    assert len(nodes) == 11
    np.testing.assert_allclose(nodes, 0.9 * np.arange(11))
    np.testing.assert_allclose(nodes[[0, -1]], [0.0, 9.0])


def test_nodes_cached():
    domain = configure(np.linspace(0, 9, 100), wavelength=3.0)
    assert domain.nodes() is domain.nodes()


@pytest.mark.parametrize("wavelength", [0.5, 3.0])
@pytest.mark.parametrize("bc", list(BoundaryCondition))
def test_system_matrix(wavelength, bc):
    rng = np.random.default_rng(7)
    x = np.sort(rng.uniform(0, 9, 60))
    domain = configure(x, wavelength=wavelength, boundary=bc)
    assert domain.ok_
    assert domain.error_ is None
    assert domain.Q_.is_symmetric()

    Q = calculate_q(domain.grid_, domain.alpha_, bc).todense()
    N = dense_design(domain)
    np.testing.assert_allclose(domain.N_.toarray(), N, atol=1e-14)
    np.testing.assert_allclose(domain.Q_.todense(), Q + N.T @ N,
                               rtol=1e-12, atol=1e-12)


@pytest.mark.parametrize("kwargs", [
    dict(x=None),
    dict(x=[]),
    dict(x=[[0.0, 1.0], [2.0, 3.0]]),
    dict(x=[0.0, np.nan, 2.0]),
    dict(x=np.linspace(0, 9, 100), wavelength=-1.0),
    dict(x=np.linspace(0, 9, 100), wavelength=np.inf),
    dict(x=np.linspace(0, 9, 100), boundary=3),
    dict(x=np.linspace(0, 9, 100), boundary=-1),
    dict(x=np.linspace(0, 9, 100), wavelength=10.0),
    dict(x=np.arange(10.0), wavelength=3.0),
    dict(x=np.full(5, 2.0)),
])
def test_invalid_configuration(kwargs):
    domain = SplineDomain(**kwargs)
    assert not domain.ok_
    assert isinstance(domain.error_, ConfigError)
    with pytest.raises(ConfigError):
        configure(**kwargs)


def test_degenerate_domain_sentinels():
    x = np.linspace(0, 4, 5)
    domain = SplineDomain(x, wavelength=5.0)
    assert not domain.ok_
    assert len(domain.nodes()) == 0

    spline = domain.apply(np.arange(5.0))
    assert not spline.ok_
    assert spline.evaluate(1.0) == 0.0
    np.testing.assert_array_equal(spline.evaluate(x), np.zeros(5))
    assert spline.coefficient(0) == 0.0
    assert len(spline.curve()) == 0
    assert len(spline.coefficients_) == 0


def test_samples_copied():
    x = np.linspace(0, 9, 100)
    domain = configure(x, wavelength=3.0)
    x[0] = -5
    assert domain.x[0] == 0.0
    assert domain.xmin == 0.0


def test_copy_is_deep():
    rng = np.random.default_rng(3)
    x = np.linspace(0, 9, 80)
    y = np.sin(x) + rng.normal(0, 0.1, 80)
    domain = configure(x, wavelength=2.0, boundary=1)
    expected = domain.apply(y).coefficients_

    for dup in (domain.copy(), copy.copy(domain), copy.deepcopy(domain)):
        assert dup.ok_
        np.testing.assert_array_equal(dup.apply(y).coefficients_, expected)
        dup.x[:] = 0
        dup.Q_.data[:] = 0
        dup.lu_.lu[:] = 0
        dup.lu_.pivots[:] = 0
        dup.N_.data[:] = 0
        dup.nodes()[:] = -1

    np.testing.assert_array_equal(domain.x, x)
    np.testing.assert_array_equal(domain.apply(y).coefficients_, expected)
    np.testing.assert_allclose(domain.nodes(), domain.grid_.node_positions())


def test_injected_logger(caplog):
    log = logging.getLogger("test.bspline_filter")
    caplog.set_level(logging.DEBUG, logger="test.bspline_filter")
    configure(np.linspace(0, 9, 25), wavelength=3.0, logger=log)
    messages = [r.getMessage() for r in caplog.records if r.name == log.name]
    assert any("Using M node intervals: 24" in m for m in messages)
    assert any(m.startswith("Alpha:") for m in messages)
    assert any("Q after addition of P" in m for m in messages)


def test_setup_failure_logged(caplog):
    log = logging.getLogger("test.bspline_filter.fail")
    caplog.set_level(logging.DEBUG, logger=log.name)
    domain = SplineDomain(np.arange(5.0), wavelength=10.0, logger=log)
    assert not domain.ok_
    assert any("Domain setup failed" in r.getMessage() for r in caplog.records)


def test_samples_on_nodes():
    # every sample sits on a node of the planned grid
    x = np.linspace(0, 9, 100)
    domain = SplineDomain(x, wavelength=3.0)
    assert domain.ok_
    assert domain.M == 99
    assert domain.Q_.is_symmetric()

    est = BSplineFilter(wavelength=3.0).fit(x, np.sin(x))
    fitted = est.predict(x)
    assert np.all(np.isfinite(fitted))
    assert np.corrcoef(fitted, np.sin(x))[0, 1] > 0.9


def test_set_domain_reruns_setup():
    x = np.linspace(0, 9, 60)
    domain = configure(x, wavelength=3.0)
    old_nodes = domain.nodes()

    x2 = np.linspace(-1, 4, 40)
    assert domain.set_domain(x2, wavelength=0.5, boundary=2)
    fresh = configure(x2, wavelength=0.5, boundary=2)
    assert domain.boundary == BoundaryCondition.ZERO_SECOND
    assert domain.alpha_ == fresh.alpha_
    assert domain.M == fresh.M == 39
    assert domain.nodes() is not old_nodes
    np.testing.assert_allclose(domain.nodes(), fresh.nodes())
    np.testing.assert_array_equal(domain.Q_.todense(), fresh.Q_.todense())

    assert not domain.set_domain(x2, wavelength=-1.0)
    assert isinstance(domain.error_, ConfigError)
    assert domain.grid_ is None and domain.lu_ is None
    assert len(domain.nodes()) == 0

    assert domain.set_domain(x, wavelength=3.0)
    assert domain.error_ is None


def test_factorization_failure():
    # no sample reaches node 2 and there is no penalty to fill its row
    x = [0.0, 0.0, 0.0, 1.0]
    domain = SplineDomain(x, wavelength=0.0)
    assert not domain.ok_
    assert isinstance(domain.error_, FactorizationError)
    assert domain.lu_ is None
    np.testing.assert_allclose(domain.nodes(), [0, 0.25, 0.5, 0.75, 1.0])
    assert domain.apply([1.0, 2.0, 3.0, 4.0]).coefficients_.size == 0

    with pytest.raises(FactorizationError):
        configure(x, wavelength=0.0)
