"""Schema-driven asset tagging engine."""
