"""Namespace-grouped GraphQL client generator."""

__version__ = "0.1.0"
