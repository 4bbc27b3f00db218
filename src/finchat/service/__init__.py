"""Core chat, retrieval and ingestion services for finchat."""
