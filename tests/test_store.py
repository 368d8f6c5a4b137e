import json
import unittest
from unittest.mock import MagicMock

from tourism_mcp.services.store import InMemoryTTLStore, RedisTTLStore, create_store


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class TestInMemoryTTLStore(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.store = InMemoryTTLStore(clock=self.clock)

    def test_put_and_get(self):
        self.store.put("booking:1", {"status": "pending"}, 60)
        self.assertEqual(self.store.get("booking:1"), {"status": "pending"})

    def test_missing_key_returns_default(self):
        self.assertIsNone(self.store.get("nope"))
        self.assertEqual(self.store.get("nope", []), [])

    def test_expires_after_ttl(self):
        self.store.put("k", "v", 60)
        self.clock.advance(59)
        self.assertEqual(self.store.get("k"), "v")
        self.clock.advance(1)
        self.assertIsNone(self.store.get("k"))

    def test_put_rearms_ttl(self):
        self.store.put("k", "v1", 60)
        self.clock.advance(50)
        self.store.put("k", "v2", 60)
        self.clock.advance(50)
        self.assertEqual(self.store.get("k"), "v2")

    def test_put_if_absent(self):
        self.assertTrue(self.store.put_if_absent("k", ["a"], 60))
        self.assertFalse(self.store.put_if_absent("k", ["b"], 60))
        self.assertEqual(self.store.get("k"), ["a"])
        self.clock.advance(60)
        self.assertTrue(self.store.put_if_absent("k", ["c"], 60))
        self.assertEqual(self.store.get("k"), ["c"])

    def test_delete(self):
        self.store.put("k", "v", 60)
        self.store.delete("k")
        self.assertIsNone(self.store.get("k"))
        # Deleting an absent key is fine
        self.store.delete("k")

    def test_values_are_copied(self):
        value = {"tickets": []}
        self.store.put("k", value, 60)
        value["tickets"].append("TKT-1")
        fetched = self.store.get("k")
        self.assertEqual(fetched, {"tickets": []})
        fetched["tickets"].append("TKT-2")
        self.assertEqual(self.store.get("k"), {"tickets": []})

    def test_compare_and_swap(self):
        self.store.put("k", {"status": "pending"}, 60)
        self.assertTrue(self.store.compare_and_swap("k", {"status": "pending"}, {"status": "confirmed"}, 60))
        self.assertEqual(self.store.get("k"), {"status": "confirmed"})
        # Second writer with the stale expectation loses
        self.assertFalse(self.store.compare_and_swap("k", {"status": "pending"}, {"status": "cancelled"}, 60))
        self.assertEqual(self.store.get("k"), {"status": "confirmed"})

    def test_compare_and_swap_on_expired_key(self):
        self.store.put("k", "v", 10)
        self.clock.advance(10)
        self.assertFalse(self.store.compare_and_swap("k", "v", "w", 10))
        self.assertIsNone(self.store.get("k"))

    def test_sweep_and_len(self):
        self.store.put("short", 1, 10)
        self.store.put("long", 2, 100)
        self.assertEqual(len(self.store), 2)
        self.clock.advance(20)
        self.assertEqual(len(self.store), 1)
        self.assertEqual(self.store.sweep(), 1)
        self.assertEqual(self.store.get("long"), 2)


class TestRedisTTLStore(unittest.TestCase):
    def setUp(self):
        self.client = MagicMock()
        self.store = RedisTTLStore(self.client, namespace="t:")

    def test_put_serializes_with_expiry(self):
        self.store.put("booking:1", {"a": 1}, 7200)
        self.client.set.assert_called_once_with("t:booking:1", json.dumps({"a": 1}), ex=7200)

    def test_get_decodes_json(self):
        self.client.get.return_value = '{"a": 1}'
        self.assertEqual(self.store.get("booking:1"), {"a": 1})
        self.client.get.assert_called_once_with("t:booking:1")

    def test_get_missing(self):
        self.client.get.return_value = None
        self.assertEqual(self.store.get("x", "default"), "default")

    def test_delete(self):
        self.store.delete("k")
        self.client.delete.assert_called_once_with("t:k")

    def test_put_if_absent_uses_nx(self):
        self.client.set.return_value = None
        self.assertFalse(self.store.put_if_absent("bookings:index", ["BKG-1"], 7200))
        self.client.set.assert_called_once_with("t:bookings:index", json.dumps(["BKG-1"]), ex=7200, nx=True)
        self.client.set.return_value = True
        self.assertTrue(self.store.put_if_absent("bookings:index", ["BKG-1"], 7200))

    def _run_transaction(self, current):
        pipe = MagicMock()
        pipe.get.return_value = current

        def transaction(func, *keys, value_from_callable=False):
            self.assertEqual(keys, ("t:k",))
            self.assertTrue(value_from_callable)
            return func(pipe)

        self.client.transaction.side_effect = transaction
        return pipe

    def test_compare_and_swap_matches(self):
        pipe = self._run_transaction(json.dumps({"status": "pending"}))
        swapped = self.store.compare_and_swap("k", {"status": "pending"}, {"status": "confirmed"}, 60)
        self.assertTrue(swapped)
        pipe.multi.assert_called_once()
        pipe.set.assert_called_once_with("t:k", json.dumps({"status": "confirmed"}), ex=60)

    def test_compare_and_swap_mismatch(self):
        pipe = self._run_transaction(json.dumps({"status": "confirmed"}))
        swapped = self.store.compare_and_swap("k", {"status": "pending"}, {"status": "cancelled"}, 60)
        self.assertFalse(swapped)
        pipe.set.assert_not_called()

    def test_compare_and_swap_missing(self):
        pipe = self._run_transaction(None)
        self.assertFalse(self.store.compare_and_swap("k", {"a": 1}, {"a": 2}, 60))
        pipe.multi.assert_not_called()


class TestCreateStore(unittest.TestCase):
    def test_memory(self):
        self.assertIsInstance(create_store("memory"), InMemoryTTLStore)

    def test_redis(self):
        store = create_store("redis", "redis://localhost:6379/0")
        self.assertIsInstance(store, RedisTTLStore)

    def test_unknown_backend(self):
        with self.assertRaises(ValueError):
            create_store("memcached")


if __name__ == "__main__":
    unittest.main()
