"""Shared constants, enumerations, configuration and logging setup."""
