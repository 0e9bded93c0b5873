"""
Household budget tracking and analytics engine.
"""

__version__ = "1.0.0"
