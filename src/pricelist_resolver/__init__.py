"""
Pricelist Resolver Package

Resolves the price-list rules that apply to a scanned product.
Looks the product up by barcode, fetches candidate rules from the active
price lists and partitions them by scope (global, category, template, variant).
"""

__version__ = "1.0.0"
