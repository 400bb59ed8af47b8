"""
Database Models

This package defines the database models for the auth info store using SQLAlchemy ORM.

Key Models:
- base.py: Base SQLAlchemy model with common type definitions
- user.py: The user table read by the user lookup store
- user_auth.py: External identity records, one row per login through an auth module

The data models follow these relationships:
- User: A local account identified by an integer id, login and email
- UserAuth: An external identity (auth module + auth id) attached to a User, with the
  OAuth token material returned by the provider

OAuth token columns on UserAuth hold base64 encoded ciphertext. They are never written
in plaintext; the store encrypts on write and decrypts on read.
"""
