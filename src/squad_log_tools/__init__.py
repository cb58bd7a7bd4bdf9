"""
Squad Log Tools - Python package for Squad server log analysis

This package reads Squad dedicated server logs and keeps a resumable record of
games played, who killed and revived whom, and which classes each player used.
"""

__version__ = '0.1.0'
