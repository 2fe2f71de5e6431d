"""
Inventory tracking service.

Stores inventory items and records stock-in/stock-out transactions against them.
"""
