"""
Top-level package for the Bookcom catalog.

All functionality lives in submodules under ``app``; the command line
interface is in ``cli``.
"""

__all__ = []
