"""Ledger API: per-user income and expense tracking with filtered listing and summaries."""
