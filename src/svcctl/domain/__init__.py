"""Domain layer: enums, models, error taxonomy and stderr classification."""
