"""
Chittoor Project Tracker - solar installation project tracking toolkit.

This package provides the village/mandal location reconciliation used by the
project form, project record handling synced with the CRM approval feed, and
aggregate reporting over project exports.
"""

__version__ = "1.0.0"
__author__ = "Data Analytics Team"
