"""Non-SQL repository implementations."""
