"""
Auth Info Store

This package persists the external identities of local users: one record per login
through an authentication module (for example an OAuth provider), together with the
token material the provider returned. Token material is encrypted before it is written
and decrypted after it is read, so it is never stored in plaintext.

Key Components:
- store: AuthInfoStore, the queries and commands over user_auth records
- encryption: the secrets service interface and its Fernet implementation
- database: plain and transactional session scopes
- users: user lookup by login or email
- dispatch: explicit handler registry for dispatching queries and commands by type
- model: SQLAlchemy models for users and their auth info
- app: aiohttp host that wires the store and exposes health probes
- util: operator command line utilities

Record Lifecycle:
1. A successful login inserts a new record (set_auth_info). Older records stay.
2. A token refresh either inserts again or updates every record for the user and
   auth module in place (update_auth_info).
3. Readers always get the most recently created record (get_auth_info).
4. A record fetched earlier can be deleted by exact match (delete_auth_info).
"""
