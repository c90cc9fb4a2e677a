"""Ingestion job routes, error mapping and response mapping."""
