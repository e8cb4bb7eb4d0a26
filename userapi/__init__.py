"""A user-management WSGI service backed by PostgreSQL."""

__version__ = "0.1.0"