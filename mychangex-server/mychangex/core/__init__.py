"""Core configuration, security and shared error types."""
