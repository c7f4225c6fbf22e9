"""Supermarket web application: server-rendered pages, database models and migrations."""

__version__ = "0.1.0"