"""
API Package

HTTP surface of the dashboard: state, prices, portfolio metrics and the
refresh/cancel actions.
"""
