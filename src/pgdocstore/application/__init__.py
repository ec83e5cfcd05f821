"""Application layer: document CRUD orchestration."""
