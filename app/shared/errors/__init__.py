"""
Shared error handling package.

Translates analytics domain errors into JSON error responses
in one place, so routers never build error bodies themselves.
"""
