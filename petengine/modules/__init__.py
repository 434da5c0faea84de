"""Game modules: pure engines plus the async services that orchestrate them."""
