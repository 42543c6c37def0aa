"""
Per-sector call agents.

Each agent:
- Declares the fields it needs and the prompt for each one
- Works against a mock dataset for its sector
- Emits one event per run: complete, error, need_info or need_escalation
"""
