"""Operator command-line interface for Tempest."""
