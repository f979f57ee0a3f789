"""tinynotes — per-user Markdown note store with one level of subjects."""

__version__ = "0.3.0"
