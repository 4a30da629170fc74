"""Cucumber scenario discovery and runner"""

__version__ = "1.0.0"
