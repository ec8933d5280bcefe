"""
Jalendr - scheduling bridge between a calling agent and Google Calendar.
"""

__version__ = "0.1.0"
