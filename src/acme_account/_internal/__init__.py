"""acme-account internal implementation details."""
