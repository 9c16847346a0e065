"""
Domain layer package.

Portfolio ledger, indicator math, series sampling and alert rules.
Only numpy/pandas are allowed here; no web framework and no storage.
"""
