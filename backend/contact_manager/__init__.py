"""
Contact Manager: contact intake API, persistence and form client
"""
__version__ = "0.1.0"
