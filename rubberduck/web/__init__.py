"""
Dataserver package for Rubber Duck.

This package contains the ASGI application the supervisor launches, its
health-check route and middleware, and the Hypercorn runner.
"""
