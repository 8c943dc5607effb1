"""Pytest configuration for the Upsy Desky integration."""

pytest_plugins = "pytest_homeassistant_custom_component"
