"""
Application Layer

Orchestrates the balancing domain for the API: workspaces, product selection,
session commands and persistence.
"""
