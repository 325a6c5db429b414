"""
RunRealm tracker.

Turns GPS running activity into claimable territories:
location fixes -> RunTracker -> RunSession -> TerritoryDeriver -> TerritoryRegistry.
"""

__version__ = "0.1.0"
