"""Weather adapters."""
