"""
MenuSight - menu and pricing console backend
"""
