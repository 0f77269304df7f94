"""Build, test and render an html coverage report for a cargo project via grcov."""

__version__ = "0.1.0"
