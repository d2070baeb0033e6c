"""Schema creation and startup seeding."""
