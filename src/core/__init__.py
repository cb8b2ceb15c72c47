"""
Core engine of the actions reporter: models, storage, statistics and ordering.
"""
