"""Domain modules mapped in tests; real files so source scanning works."""
