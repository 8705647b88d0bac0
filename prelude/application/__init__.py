"""Application layer: use-case orchestration over the domain engine and storage."""
