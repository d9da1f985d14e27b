"""
Order Flow Monitor

Two real-time stream processors per instrument:
- OrderBook: order lifecycle events → aggregated bid/ask price levels
- VolumeBoxDetector: trades → volume periods → breakout range boxes

Architecture:
- events: input event types and wire decoding
- book: order tracking and price level aggregation
- detector: volume accumulation, box lifecycle, render sinks
- core: logging, errors, refresh coalescing
- config: YAML configuration
- streams / api: websocket source and HTTP snapshot API
"""

__version__ = "1.0.0"
