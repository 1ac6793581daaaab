"""Feature modules built on the books kernel."""
