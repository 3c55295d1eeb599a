"""
Core infrastructure: database, security, errors.
"""
