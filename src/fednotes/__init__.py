"""fednotes - a self-hosted, file-backed markdown note editor."""

__version__ = "0.1.0"
