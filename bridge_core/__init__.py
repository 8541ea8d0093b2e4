# =============================================================================
# bridge_core/__init__.py
# Bridge Storefront Data Layer
# =============================================================================
"""
Data layer for the bridge storefront.

Local key/value persistence, a Supabase gateway that degrades to local-only
operation, a sync store holding the canonical collections, and the services
(admin workspace, cart, checkout, analytics) that drive them.
"""

__version__ = "0.4.0"
