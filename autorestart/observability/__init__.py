"""Logging setup shared by the watchdog and its host app."""
