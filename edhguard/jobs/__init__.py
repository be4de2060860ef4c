"""Command-line jobs for importing cards, seeding and validating decks."""
