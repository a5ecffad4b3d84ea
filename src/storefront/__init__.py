"""Storefront API: catalog, cart, checkout, reviews, sales reports and payments."""
