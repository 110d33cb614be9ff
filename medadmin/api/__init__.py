"""HTTP layer: route modules and request dependencies."""
