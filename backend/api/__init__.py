"""
Debate Arena API package.

Provides the FastAPI application (``api.app``) and the service container
(``api.dependencies``).
"""
