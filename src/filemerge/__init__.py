"""
filemerge - layered configuration file composition

filemerge builds a project's configuration files from a master template,
fragments contributed by packages and modules, and project overrides.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
