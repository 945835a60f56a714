"""
Meeting Contact Sync - pushes meeting-derived contact updates into Salesforce.
"""

__version__ = "0.1.0"
