"""Sentinela records service."""
