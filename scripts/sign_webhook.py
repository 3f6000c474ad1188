"""HMAC signing helper for simulating Shopify webhooks.

Reads a JSON body from stdin and prints the base64 HMAC-SHA256 signature
computed with SHOPIFY_API_SECRET from the environment (or .env file).

Usage:
    BODY='{"id":1,"domain":"my-shop.myshopify.com"}'
    HMAC=$(echo -n "$BODY" | python -m scripts.sign_webhook)
    curl -X POST http://localhost:8000/api/webhooks/app/uninstalled \\
      -H "Content-Type: application/json" \\
      -H "X-Shopify-Hmac-Sha256: $HMAC" \\
      -H "X-Shopify-Shop-Domain: my-shop.myshopify.com" \\
      -d "$BODY"
"""

import sys

from privacy_popup.core.config import settings
from privacy_popup.integrations.shopify.signatures import sign


def main() -> None:
    body = sys.stdin.buffer.read()
    if not body:
        print("ERROR: No input received on stdin", file=sys.stderr)
        sys.exit(1)

    print(sign(body, settings.shopify_api_secret), end="")


if __name__ == "__main__":
    main()
