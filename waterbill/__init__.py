"""Water association billing: tiered tariff, cost-share and invoice batches."""

__version__ = "1.0.0"
