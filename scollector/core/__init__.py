"""Core types - configuration, credentials, extraction pattern, logging."""
