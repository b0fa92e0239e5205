"""Linearizability checking of concurrent histories, with a key/value model and HTML visualisation."""

__version__ = "0.1.0"