"""Infrastructure: logging, metrics and object-storage backends."""
