"""
Quote Pricing Package

Stateless pricing for point-of-sale and quotations: volume breaks, customer
tier and line/order discounts, Canadian sales tax and margin, all in
integer cents.
"""

__version__ = "1.0.0"
