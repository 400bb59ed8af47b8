"""
Auth Info Service Host

This package hosts the auth info store in an aiohttp application. The application owns
the lifecycle of the store's collaborators and exposes them to other handlers through
typed AppKeys.

Key Components:
- keys.py: Typed AppKeys for dependency injection
- server.py: Application factory, collaborator wiring and probe handlers
- cli.py: Entry point for running the application

It provides the following endpoints:
- /internal/alive: Liveness probe
- /internal/ready: Readiness probe, checks the database connection
"""
