"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: Default admin creation on startup
- cache: In-memory TTL cache for resolved identities
- db: Database configuration and connection management
- errors: Error taxonomy and exception handlers
- security: Password hashing and session tokens
"""
