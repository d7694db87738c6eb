"""Domain layer - storage-independent model of tables, rows and predicates."""
