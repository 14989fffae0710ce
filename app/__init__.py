"""Announcement broadcasting service."""
