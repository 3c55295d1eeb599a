"""
Domain data models.
"""
