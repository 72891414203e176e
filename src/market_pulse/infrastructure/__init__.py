"""Cross-cutting infrastructure: database adapters and observability."""
