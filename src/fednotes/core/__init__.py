"""Core services: configuration, rendering and external integrations."""
