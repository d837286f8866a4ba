"""HTTP API for the webform migrator."""
