"""Business logic for tasks, users, categories and auth."""
