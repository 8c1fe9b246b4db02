"""Provider clients for quotes and exchange rates."""
