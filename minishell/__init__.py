"""A small interactive shell with pipelines, redirections, quoting, variable expansion and builtins."""

__version__ = "0.1.0"
__all__ = ["__version__"]