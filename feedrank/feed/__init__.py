"""
Feed ranking engine.

Profile and query generation, concurrent candidate fetch, filtering,
scoring, channel diversity and trending/personalized mixing.
"""
