"""Milestone escrow backend package."""
