"""Text-level scanning and rewriting primitives."""
