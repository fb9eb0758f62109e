"""Identity domain: accounts, roles, permissions and their contracts."""
