"""Core contracts of the envelope subsystem: exceptions, metadata, protocols."""
