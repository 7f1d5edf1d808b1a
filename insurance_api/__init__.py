"""Insurance Management API: user registration and authentication."""

__version__ = "0.1.0"
