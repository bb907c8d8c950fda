"""
Configuration, logging, errors and connection management for the account core.
"""
