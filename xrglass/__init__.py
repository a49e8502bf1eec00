"""XRglass: heuristic trust scoring for XRP Ledger wallets and project domains."""

__version__ = "1.0.0"
