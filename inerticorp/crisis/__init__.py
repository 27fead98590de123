"""Crisis lifecycle: definitions, live instances, responses and the 2d6 resolver."""
