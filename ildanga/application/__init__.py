"""Application layer: trip store, wizard flow and proxy gateways."""
