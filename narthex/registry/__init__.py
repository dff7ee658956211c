"""
Storage for registered keys.
"""
