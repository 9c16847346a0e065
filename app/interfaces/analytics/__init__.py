"""HTTP interface for the analytics bounded context."""
