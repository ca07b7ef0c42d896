"""Interactive installer and configurator for the Backhaul tunnel."""

__version__ = "1.0.0"
