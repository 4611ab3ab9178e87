"""Pollfeed: social polling service with a personalized, trending-aware feed."""

__version__ = "0.1.0"
