"""Deltalytix - trade journal analytics and prop-firm account tracking."""

__version__ = "0.1.0"
