"""
Exchange Module

This module contains all exchange-related functionality.
"""
