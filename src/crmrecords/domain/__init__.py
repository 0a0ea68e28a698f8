"""Domain layer: CRM records, persistence ports and the record reconciler."""
