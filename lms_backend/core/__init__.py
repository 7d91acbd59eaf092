"""Core auth, security and logging."""
