"""Data models for ybproxy."""
