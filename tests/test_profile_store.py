import redis

from cquiz.schemas.profile import UserProfile
from cquiz.utils.profile_store import (
    InMemoryProfileStore,
    RedisProfileStore,
    create_profile_store,
)


class DictRedis:
    """Minimal get/set client"""

    def __init__(self, data=None):
        self.data = dict(data or {})

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value


class BrokenRedis:
    def get(self, key):
        raise redis.ConnectionError("connection refused")

    def set(self, key, value):
        raise redis.ConnectionError("connection refused")


def test_missing_key_loads_defaults():
    store = RedisProfileStore(DictRedis(), key="profile")

    assert store.load() == UserProfile()


def test_save_then_load_whole_profile():
    client = DictRedis()
    store = RedisProfileStore(client, key="profile")
    profile = UserProfile(weak_topics={"Pointers": 2}, total_quizzes=3, average_score=61.5)

    store.save(profile)

    assert list(client.data) == ["profile"]
    assert RedisProfileStore(client, key="profile").load() == profile


def test_malformed_value_loads_defaults():
    store = RedisProfileStore(DictRedis({"profile": "{not json"}), key="profile")

    assert store.load() == UserProfile()


def test_redis_errors_are_not_raised():
    store = RedisProfileStore(BrokenRedis(), key="profile")

    assert store.load() == UserProfile()
    store.save(UserProfile(total_quizzes=1))


def test_unreachable_redis_falls_back_to_memory():
    store = create_profile_store("redis://127.0.0.1:1/0", key="profile")

    assert isinstance(store, InMemoryProfileStore)


def test_in_memory_store_returns_copies():
    store = InMemoryProfileStore()
    profile = UserProfile(weak_topics={"Arrays": 1})
    store.save(profile)

    loaded = store.load()
    loaded.weak_topics["Arrays"] = 9

    assert store.load().weak_topics == {"Arrays": 1}


def test_malformed_redis_url_falls_back_to_memory():
    store = create_profile_store("not-a-redis-url", key="profile")

    assert isinstance(store, InMemoryProfileStore)
