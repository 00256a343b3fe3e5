"""orderdesk: storefront order intake with ledger and email fan-out."""

__version__ = "0.1.0"
