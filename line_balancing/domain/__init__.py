"""
Domain Layer

Pure balancing logic: no I/O, no framework code.
"""
