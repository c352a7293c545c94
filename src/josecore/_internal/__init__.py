"""josecore internal implementation."""
