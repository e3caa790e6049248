"""Domain layer: entities, exceptions, repository interfaces and pure rules."""
