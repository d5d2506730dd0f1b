"""
Pricer Package

Quote pricing for contractor catalogs.
Turns catalog products, entered quantities and assigned price multipliers
into a priced, discounted, taxed customer quote.
"""

__version__ = "1.0.0"
