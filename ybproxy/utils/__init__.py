"""Utility helpers for ybproxy."""
