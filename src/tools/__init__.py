"""Tool registry, executor and the demo tool set."""
