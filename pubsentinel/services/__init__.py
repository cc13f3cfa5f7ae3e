"""Service layer — backup and apply orchestration around the engines."""
