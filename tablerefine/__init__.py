"""
django-tablerefine: server-built tables with a client-side refinement and
action dispatch engine.
"""

from .defaults import LIBRARY_NAME, LIBRARY_VERSION

__version__ = LIBRARY_VERSION

__all__ = ["LIBRARY_NAME", "__version__"]
