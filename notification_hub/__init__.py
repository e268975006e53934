"""Notification dispatch and delivery service.

Persists scoped notifications, fans them out as push messages and streams
store mutations to live clients.
"""
