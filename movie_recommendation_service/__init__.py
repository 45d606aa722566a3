"""Personalized movie recommendation service."""
