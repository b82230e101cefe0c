"""
Core building blocks: configuration, data model and interval geometry.
"""
