"""
audioedit Utilities Module

Utility functions and helpers:
- logger: Logging configuration
"""
from .logger import logger, set_verbose

__all__ = ['logger', 'set_verbose']
