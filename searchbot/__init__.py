"""
searchbot - multi-provider web search aggregation
"""

__version__ = "0.1.0"
__logo__ = "🔎"
