"""Live project and service listing."""
