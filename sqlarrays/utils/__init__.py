"""Utility helpers for sqlarrays."""
