"""Foundation layer - errors, configuration and logging with no engine dependencies."""
