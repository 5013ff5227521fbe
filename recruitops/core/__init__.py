"""
Core module - configuration, authentication and logging.
"""
