"""
Catalog package initializer.

The catalog is organised into layers: ``core`` (configuration, logging,
database, errors), ``cache`` (bounded per-entity caches and cache-aside
access), ``store`` (persistence), ``schemas`` (pydantic input/output
models) and ``services`` (business logic, including the bulk authorship
merge).  ``create_catalog`` wires them together.
"""

from .main import Catalog, create_catalog  # noqa: F401
