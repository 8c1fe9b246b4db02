"""Quote and exchange-rate ingestion."""
