"""JobNest Modules - All application modules."""
