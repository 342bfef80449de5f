"""Message tag to cache key routing."""

from fleetdeck.live.invalidation import INVALIDATION_MAP, InvalidationRouter
from fleetdeck.live.messages import CacheKey, LiveMessage, MessageType


def test_load_update_invalidates_loads_then_metrics(fake_cache):
    router = InvalidationRouter(fake_cache)

    keys = router.route(LiveMessage(type="load_update", payload={"id": 1}))

    assert keys == [CacheKey.LOADS, CacheKey.METRICS]
    assert fake_cache.invalidated == [CacheKey.LOADS, CacheKey.METRICS]


def test_security_event_invalidates_events_and_report(fake_cache):
    router = InvalidationRouter(fake_cache)

    keys = router.route(LiveMessage(type="security_event"))

    assert keys == [CacheKey.SECURITY_EVENTS, CacheKey.SECURITY_REPORT]


def test_unknown_tag_invalidates_nothing_and_is_counted(fake_cache):
    router = InvalidationRouter(fake_cache)

    assert router.route(LiveMessage(type="fuel_price_tick")) == []
    assert router.route(LiveMessage(type="fuel_price_tick")) == []

    assert fake_cache.invalidated == []
    assert router.unhandled_counts["fuel_price_tick"] == 2


def test_every_known_tag_has_keys():
    assert set(INVALIDATION_MAP) == set(MessageType)
    assert all(keys for keys in INVALIDATION_MAP.values())


def test_keys_for_matches_mapping(fake_cache):
    router = InvalidationRouter(fake_cache)

    assert router.keys_for("weather_update") == (CacheKey.WEATHER,)
    assert router.keys_for("iot_update") == (CacheKey.IOT_DEVICES,)
    assert router.keys_for("nope") == ()
