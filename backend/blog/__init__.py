"""Application package for the blog backend.

This package exposes the service, repository, session and model modules
used by the FastAPI application. Individual modules contain the concrete
implementations and documentation.
"""
