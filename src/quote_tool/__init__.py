"""
Quote Tool Package

Interactive price configurator for trade-business websites.
Computes monthly quotes from package, add-on, detail and contract
selections and relays contact requests by email.
"""

__version__ = "1.0.0"
