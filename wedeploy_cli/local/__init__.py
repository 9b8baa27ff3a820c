"""Local infrastructure management (docker)."""
