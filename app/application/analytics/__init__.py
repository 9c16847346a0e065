"""
Application layer for the analytics bounded context.

Use cases coordinate the ledger, indicator engine, sampler and alert
evaluator through ports. No framework or infrastructure imports allowed.
"""
