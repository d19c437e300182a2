"""Campus tools: room booking and printing."""
