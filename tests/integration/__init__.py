"""
HTTP tests for the to-do API.

Requests go through the Flask test client and assert on status codes and
the JSON envelope.
"""
