"""
Application layer package.

Use cases orchestrate domain services and ports to fulfil a single
request each. No framework or infrastructure imports allowed.
"""
