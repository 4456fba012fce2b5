"""Price data adapters and cache-backed ingestion."""
