"""Low-level utilities: the Safe type, escaping and iodata flattening."""
