"""vodarr - federated search across videolist-compatible VOD sources."""

__version__ = "0.1.0"
