"""
Infrastructure layer package.

Adapters behind the domain ports: the sample market data feed and the
in-memory portfolio and alert stores.
"""
