"""Production collaborators driven by the staging controller."""
