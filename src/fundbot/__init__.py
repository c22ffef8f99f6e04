"""
fundbot: conversational query router for mutual-fund client records.
"""

__version__ = "1.0.0"
