"""Export, import-plan preview and import routes."""
