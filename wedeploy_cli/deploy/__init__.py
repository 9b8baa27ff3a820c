"""Deployment, linking and deployment watching."""
