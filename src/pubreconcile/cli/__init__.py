"""Command-line interface for pubreconcile."""
