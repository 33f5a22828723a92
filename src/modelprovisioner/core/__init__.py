"""Core building blocks: configuration, credentials, errors and logging."""
