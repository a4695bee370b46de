"""Core utilities: exceptions, correlation context and locking."""
