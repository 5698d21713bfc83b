"""CLI command groups: ``generate``, ``inspect`` and ``config``."""
