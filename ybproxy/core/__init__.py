"""Core primitives shared across ybproxy."""
