"""
Core components of the console: logging, sync primitives and client stores.
"""
