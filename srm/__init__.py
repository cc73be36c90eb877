"""Package-scoped commit filtering for monorepo releases."""

__version__ = "0.1.0"
