"""Deployment checklist: git push, site probing and publication monitoring."""
