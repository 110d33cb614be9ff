"""BLOX Medical Admin API: accounts, role-gated documents and audit trail."""
