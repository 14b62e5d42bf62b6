"""Provider implementations of the completion transport."""
