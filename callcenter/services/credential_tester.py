"""
Live checks that check a third-party credential before it is saved.

Each check makes one cheap authenticated request and reports whether the
provider accepted it. Network failures count as a failed check.
"""

import asyncio
import logging

import aiohttp

from callcenter.shared.errors import CredentialTestError
from callcenter.shared.interfaces import ICredentialTester

logger = logging.getLogger(__name__)

SHOPIFY_SHOP_URL = "https://{store_url}/admin/api/2024-01/shop.json"
STRIPE_CUSTOMERS_URL = "https://api.stripe.com/v1/customers"
RAZORPAY_PAYMENTS_URL = "https://api.razorpay.com/v1/payments"
SHIPROCKET_SERVICEABILITY_URL = "https://apiv2.shiprocket.in/v1/external/courier/serviceability"
MLS_PROPERTIES_URL = "https://api.mls.com/v1/properties"


class CredentialTester(ICredentialTester):
    """aiohttp-backed checker for the api types we know how to verify."""

    def __init__(self, timeout_seconds: float = 5.0):
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._checks = {
            "shopify": self._test_shopify,
            "stripe": self._test_stripe,
            "razorpay": self._test_razorpay,
            "tracking_api": self._test_tracking,
            "emr_epic": self._test_epic,
            "mls_nar": self._test_mls,
        }

    def supported_types(self) -> list[str]:
        return list(self._checks)

    async def test(self, api_type: str, credentials: dict) -> bool:
        check = self._checks.get(api_type)
        if check is None:
            raise CredentialTestError(f"Unknown API type: {api_type}")
        try:
            return bool(await check(credentials))
        except KeyError as e:
            logger.warning(f"{api_type} check missing field {e}")
            return False
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.warning(f"{api_type} check failed: {e}")
            return False

    async def _get_ok(self, url: str, **kwargs) -> bool:
        async with aiohttp.ClientSession(timeout=self._timeout) as session:
            async with session.get(url, **kwargs) as resp:
                return resp.status == 200

    async def _test_shopify(self, creds: dict) -> bool:
        url = SHOPIFY_SHOP_URL.format(store_url=creds["store_url"].strip().rstrip("/"))
        return await self._get_ok(url, headers={"X-Shopify-Access-Token": creds["access_token"]})

    async def _test_stripe(self, creds: dict) -> bool:
        return await self._get_ok(
            STRIPE_CUSTOMERS_URL,
            params={"limit": 1},
            headers={"Authorization": f"Bearer {creds['secret_key']}"},
        )

    async def _test_razorpay(self, creds: dict) -> bool:
        return await self._get_ok(
            RAZORPAY_PAYMENTS_URL,
            params={"count": 1},
            auth=aiohttp.BasicAuth(creds["key_id"], creds["key_secret"]),
        )

    async def _test_tracking(self, creds: dict) -> bool:
        if creds.get("provider") != "shiprocket":
            # No check for the other couriers yet
            return True
        return await self._get_ok(
            SHIPROCKET_SERVICEABILITY_URL,
            params={"pickup_postcode": "110001", "delivery_postcode": "110002", "weight": "0.5"},
            headers={"Authorization": f"Bearer {creds['api_key']}"},
        )

    async def _test_epic(self, creds: dict) -> bool:
        url = f"{creds['api_url'].rstrip('/')}/oauth/token"
        payload = {
            "grant_type": "client_credentials",
            "client_id": creds["client_id"],
            "client_secret": creds["client_secret"],
        }
        async with aiohttp.ClientSession(timeout=self._timeout) as session:
            async with session.post(url, json=payload) as resp:
                if resp.status != 200:
                    return False
                data = await resp.json(content_type=None)
                return isinstance(data, dict) and bool(data.get("access_token"))

    async def _test_mls(self, creds: dict) -> bool:
        return await self._get_ok(
            MLS_PROPERTIES_URL,
            params={"limit": 1},
            auth=aiohttp.BasicAuth(creds["username"], creds["api_key"]),
        )
