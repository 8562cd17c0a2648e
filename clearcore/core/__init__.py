"""
Core Infrastructure Module

Provides foundational services for the ClearCore client including:
- Configuration management
- Logging setup
- Custom exceptions
"""
