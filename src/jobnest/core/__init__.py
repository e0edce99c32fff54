"""JobNest Core - Persistence plumbing shared by modules."""
