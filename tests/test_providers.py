from __future__ import annotations

import unittest

from campaign_analytics.providers import (
    PROVIDER_SHAPES,
    SHAPE_FIELDS,
    Accessor,
    coerce_id,
    coerce_number,
    detect_provider_payload,
    first_named,
    first_number,
    first_text,
    price_chain,
)


class TestDetectProviderPayload(unittest.TestCase):
    def test_content_posts_checked_first(self) -> None:
        record = {"post_result_obj": {"engagement": {"like_count": 1}, "data": [{"engagement": {}}]}}
        self.assertEqual(detect_provider_payload(record).shape, "content_posts")

    def test_engagement_array(self) -> None:
        record = {"post_result_obj": {"data": [{"engagement": {"view_count": 5}}]}}
        payload = detect_provider_payload(record)
        self.assertEqual(payload.shape, "engagement_array")
        self.assertEqual(payload.data, {"engagement": {"view_count": 5}})

    def test_nested_object(self) -> None:
        record = {"post_result_obj": {"data": {"shortcode": "x"}}}
        self.assertEqual(detect_provider_payload(record).shape, "nested_object")

    def test_flat(self) -> None:
        for record in ({}, {"post_result_obj": None}, {"post_result_obj": {"data": []}}, {"post_result_obj": "x"}):
            self.assertEqual(detect_provider_payload(record).shape, "flat")

    def test_every_shape_has_field_table(self) -> None:
        self.assertEqual(set(SHAPE_FIELDS), set(PROVIDER_SHAPES))


class TestCoercion(unittest.TestCase):
    def test_coerce_number(self) -> None:
        self.assertEqual(coerce_number("1,200"), 1200.0)
        self.assertEqual(coerce_number(3), 3.0)
        self.assertIsNone(coerce_number(True))
        self.assertIsNone(coerce_number(float("inf")))
        self.assertIsNone(coerce_number("n/a"))
        self.assertIsNone(coerce_number(None))

    def test_coerce_id(self) -> None:
        self.assertEqual(coerce_id(12), "12")
        self.assertEqual(coerce_id(" a "), "a")
        self.assertIsNone(coerce_id(False))
        self.assertIsNone(coerce_id(""))


class TestChains(unittest.TestCase):
    def test_first_number_skips_zero_and_missing(self) -> None:
        chain = (
            Accessor("a", lambda r, p: r.get("a")),
            Accessor("b", lambda r, p: r.get("b")),
            Accessor("c", lambda r, p: r.get("c")),
        )
        record = {"a": 0, "b": None, "c": "7"}
        payload = detect_provider_payload(record)
        self.assertEqual(first_number(chain, record, payload), 7.0)
        self.assertEqual(first_named(chain, record, payload), ("c", 7.0))
        self.assertEqual(first_number(chain, {}, payload), 0.0)

    def test_first_text_skips_blank(self) -> None:
        chain = (Accessor("a", lambda r, p: r.get("a")), Accessor("b", lambda r, p: r.get("b")))
        record = {"a": "  ", "b": "x"}
        self.assertEqual(first_text(chain, record, detect_provider_payload(record)), "x")

    def test_price_chain_order(self) -> None:
        record = {
            "collaboration_price": 0,
            "post_result_obj": {"data": [{"engagement": {}, "collaboration_price": 40}]},
        }
        payload = detect_provider_payload(record)
        names = [a.name for a in price_chain(payload)]
        self.assertEqual(names[0], "collaboration_price")
        self.assertEqual(names[-1], "post_result_obj.data[0].collaboration_price")
        self.assertEqual(first_named(price_chain(payload), record, payload), ("data[0].collaboration_price", 40.0))


if __name__ == "__main__":
    unittest.main()
