"""
API Routes Package
==================
Shared pieces of the analytics API; route handlers live in api.py.

Modules:
  helpers  - type coercion, date parsing, JSON conversion of results
"""
