"""
Storefront Catalog Engine

Read-only pricing and promotion resolution over the storefront catalog.
"""

__version__ = "1.0.0"
