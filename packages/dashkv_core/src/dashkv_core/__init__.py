"""Shared logging and tracing setup for the config service and the dashboard adapter."""
