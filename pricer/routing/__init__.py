"""Price routing across venue handlers."""
