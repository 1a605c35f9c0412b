"""Webhook receiver — notification ingestion and the HTTP endpoints."""
