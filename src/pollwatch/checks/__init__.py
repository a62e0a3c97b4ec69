"""Ready-made polling tasks."""
