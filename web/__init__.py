"""
Web layer for the document search service.

Flask app factory, JSON API blueprint, health probes and the logging
and error handling shared by them.
"""
