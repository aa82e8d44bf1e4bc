"""HTTP surface for session-based analysis."""
