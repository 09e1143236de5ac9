"""
feedrank: personalized home-feed ranking for video catalogues.
"""
__version__ = "0.1.0"
