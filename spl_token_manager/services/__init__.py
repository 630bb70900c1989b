"""Services implementing token operations and history retrieval."""
