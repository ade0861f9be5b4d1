"""
Today I Learned: share short facts, tag them by category and vote on them.

This package provides a FastAPI application with a data store abstraction
so the same views run against the hosted Supabase table, a SQL database, or
an in-memory store for development and tests.
"""
