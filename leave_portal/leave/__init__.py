"""Leave domain - records, store, validation, service and routes."""
