"""
Middleware package for the dataserver.

This package contains middleware classes applied to every dataserver response.
"""

from .security import SecurityHeadersMiddleware

__all__ = ["SecurityHeadersMiddleware"]
