"""Infrastructure layer: settings, database access and storage backends."""
