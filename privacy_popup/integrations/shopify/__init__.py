"""Shopify platform integration."""

from privacy_popup.integrations.shopify.client import ShopifyClient
from privacy_popup.integrations.shopify.signatures import sign, verify, verify_oauth_params

__all__ = ["ShopifyClient", "sign", "verify", "verify_oauth_params"]
