"""stalebot: mark inactive GitHub issues and pull requests as stale, then close them."""

__version__ = "0.1.0"
