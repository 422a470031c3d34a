"""
Routes package for the to-do API.

- api: JSON endpoints for accounts and tasks
"""
