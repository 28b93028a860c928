"""
Buganizer
=========

Issue tracking backend: issues, comments, attachments, saved search views,
SLA target computation and compliance reporting.
"""

__version__ = "1.0.0"
