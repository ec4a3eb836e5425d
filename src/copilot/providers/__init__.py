"""Built-in providers. Vendor adapters are registered by the host application."""
