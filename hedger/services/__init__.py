"""
Services Module

Account data fetching, pricing and portfolio analytics.
"""
