"""
Tests for the InventoryConsole sync core.
"""
