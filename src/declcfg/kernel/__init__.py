"""Core declarative config model, metadata decoding and diagnostics."""
