"""Data access: GitHub client, caches, repositories."""
