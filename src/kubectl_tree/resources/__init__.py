"""Resource models and snapshot types."""
