"""OmniCorp idle-economy simulation service."""

__version__ = "0.1.0"
