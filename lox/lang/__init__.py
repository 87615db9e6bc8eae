"""Error reporting, number semantics, sessions and the interactive shell."""
