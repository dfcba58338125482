import time
import numpy as np
from bspline_filter import SplineDomain

def benchmark(n):
    print(f"Benchmark N={n}")
    x = np.sort(np.random.uniform(0, 1, n))
    y = np.sin(2 * np.pi * x) + np.random.normal(0, 0.1, n)

    # Setup: grid search, penalty, data-fit term and factorization
    start = time.time()
    domain = SplineDomain(x, wavelength=0.05)
    end = time.time()
    setup_time = end - start
    print(f"Setup time: {setup_time:.6f} s (M={domain.M})")

    # Per-vector fits reuse the factorization
    start = time.time()
    for _ in range(10):
        domain.apply(y)
    end = time.time()
    fit_time = (end - start) / 10.0
    print(f"Fit time (avg of 10): {fit_time:.6f} s")

    print(f"Ratio (Setup / Fit): {setup_time / fit_time:.2f}x")

if __name__ == "__main__":
    for n in [500, 1000, 5000]:
        benchmark(n)
