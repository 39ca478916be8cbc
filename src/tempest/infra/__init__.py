"""
Infrastructure layer: settings, logging, exceptions and database access.
"""
