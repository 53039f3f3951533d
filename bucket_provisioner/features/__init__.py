"""Feature modules exposed over the API."""
