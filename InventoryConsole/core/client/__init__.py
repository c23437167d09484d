"""
Client-side state for the console: models, stores and view contracts.
"""
