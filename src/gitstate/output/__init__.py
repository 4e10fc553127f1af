"""Status and diff reporters."""
