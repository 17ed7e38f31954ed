"""SCD repositories.

Repositories execute and flush; commit belongs to the caller's unit of work
unless the repository opened the transaction itself.
"""
