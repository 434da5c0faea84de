"""Domain layer: rich models with identity, invariants, and domain events."""
