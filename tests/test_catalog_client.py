import unittest

import httpx

from api.catalog_client import CatalogClient, decode_products
from utils.errors import DecodeError, FetchTimeoutError, NetworkError

BASE_URL = "https://catalog.test"

RAW_PRODUCT = {
    "createdAt": "2023-07-17T07:21:02.529Z",
    "name": "Bentley Focus",
    "image": "https://loremflickr.com/640/480/food",
    "price": "51.00",
    "description": "Quasi adipisci sint veniam delectus.",
    "model": "CTS",
    "brand": "Lamborghini",
    "id": "1",
}


def client_for(handler):
    return CatalogClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))


class CatalogClientTestCase(unittest.IsolatedAsyncioTestCase):
    async def test_fetch_decodes_products(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=[RAW_PRODUCT, dict(RAW_PRODUCT, id="2")])

        products = await client_for(handler).fetch_products()

        self.assertEqual([p.id for p in products], ["1", "2"])
        self.assertEqual(products[0].created_at, "2023-07-17T07:21:02.529Z")
        self.assertEqual(products[0].brand, "Lamborghini")
        self.assertEqual(products[0].price, "51.00")

        self.assertEqual(len(requests), 1)
        self.assertEqual(requests[0].method, "GET")
        self.assertEqual(requests[0].url.path, "/products")
        self.assertEqual(requests[0].url.query, b"")

    async def test_server_error_is_network_error(self):
        client = client_for(lambda request: httpx.Response(500, text="boom"))
        with self.assertRaises(NetworkError):
            await client.fetch_products()

    async def test_connect_error_is_network_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with self.assertRaises(NetworkError):
            await client_for(handler).fetch_products()

    async def test_timeout_is_fetch_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with self.assertRaises(FetchTimeoutError):
            await client_for(handler).fetch_products()

    async def test_invalid_json_is_decode_error(self):
        client = client_for(lambda request: httpx.Response(200, text="<html>"))
        with self.assertRaises(DecodeError):
            await client.fetch_products()


class DecodeProductsTestCase(unittest.TestCase):
    def test_payload_must_be_a_list(self):
        with self.assertRaises(DecodeError):
            decode_products({"items": [RAW_PRODUCT]})

    def test_missing_field_fails_whole_batch(self):
        broken = {k: v for k, v in RAW_PRODUCT.items() if k != "price"}
        with self.assertRaises(DecodeError):
            decode_products([RAW_PRODUCT, broken])

    def test_non_string_field_fails(self):
        with self.assertRaises(DecodeError):
            decode_products([dict(RAW_PRODUCT, price=51)])

    def test_extra_fields_are_ignored(self):
        products = decode_products([dict(RAW_PRODUCT, rating="5")])
        self.assertEqual(products[0].name, "Bentley Focus")


if __name__ == "__main__":
    unittest.main()
