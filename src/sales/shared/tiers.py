"""Pricing tiers shared by product price lists and wholesale accounts."""

from enum import Enum


class PricingTier(Enum):
    STANDARD = "standard"
    RETAILER = "retailer"
    WHOLESALER = "wholesaler"
    PREMIUM = "premium"
