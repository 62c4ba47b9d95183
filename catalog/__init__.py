"""
Storefront catalog scraping package.
"""
