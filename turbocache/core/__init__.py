"""Core storage primitives: key space, artifact store, startup guard."""
