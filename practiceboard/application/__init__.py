"""Application layer: services that orchestrate the assessment engine."""
