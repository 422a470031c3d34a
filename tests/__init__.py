"""
Test suite for the to-do API.

This package contains:
- unit/: model, token, validation and store tests
- integration/: HTTP tests through the Flask test client
"""
