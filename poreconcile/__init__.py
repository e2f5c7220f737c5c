"""Reconcile gettext PO translation catalogs."""

__version__ = "0.1.0"
