"""Core configuration and credential checks."""
