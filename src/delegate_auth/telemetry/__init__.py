"""Telemetry for delegate-auth.

- system: Operational logger (stderr + optional system.jsonl)
- audit: Exchange audit trail (audit/exchange.jsonl)
- models: Pydantic models for audit events
- jsonl: JSON Lines formatter, log file setup, identifier pseudonymization
"""
