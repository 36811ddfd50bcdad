"""Agent loop, completion gateway, call ledger and run reports."""
