"""buildwatch — observe and assert on the lifecycle of CI builds."""

__version__ = "0.1.0"
