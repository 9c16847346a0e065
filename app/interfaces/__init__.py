"""
Interfaces layer package.

HTTP surface of the service: the health probe and the analytics router
with its request/response models and dependency wiring.
"""
