"""
Shared helpers for MenuSight
"""
