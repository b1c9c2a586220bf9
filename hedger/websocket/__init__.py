"""
WebSocket module for the live market-data stream.
"""
