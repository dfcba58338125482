from setuptools import setup, find_packages

setup(
    name="bspline_filter",
    version="0.1.0",
    description="Band-limited cubic B-spline smoothing of one-dimensional samples",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "scipy",
        "scikit-learn",
    ],
    extras_require={
        "test": ["pytest"],
        "docs": ["sphinx", "myst_parser"],
    },
)
