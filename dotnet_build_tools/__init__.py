"""Build automation helpers for .NET CI pipelines."""

__version__ = "1.0.0"
