"""Cached, rate-limited location-aware search for the dog services directory."""
