"""fwaudit - framework-aware code auditing grounded in official documentation."""

__version__ = "0.3.0"
