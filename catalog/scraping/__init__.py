"""
Catalog acquisition engine: fetch, extract, normalize, schedule, persist.
"""
