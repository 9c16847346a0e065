"""
Shared module package.

Cross-cutting concerns used by the analytics service:
- Error handling and mapping
- Security headers and rate limiting
- Logging configuration
"""
