"""Cross-cutting infrastructure: database, logging, ports."""
