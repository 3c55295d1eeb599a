"""
Pure helpers for order lifecycle and pricing.
"""
