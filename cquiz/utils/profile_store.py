"""
Profile store: a single key holding the serialized personalization profile
"""
import redis
import logging
from typing import Optional
from pydantic import ValidationError
from cquiz.config import settings
from cquiz.schemas.profile import UserProfile

logger = logging.getLogger(__name__)


class InMemoryProfileStore:
    """Process-local profile store"""
    
    def __init__(self, profile: Optional[UserProfile] = None):
        self._profile = profile
    
    def load(self) -> UserProfile:
        if self._profile is None:
            return UserProfile()
        return self._profile.model_copy(deep=True)
    
    def save(self, profile: UserProfile) -> None:
        self._profile = profile.model_copy(deep=True)


class RedisProfileStore:
    """Redis-backed profile store, one key per installation"""
    
    def __init__(self, redis_client, key: str = None):
        self.redis_client = redis_client
        self.key = key or settings.PROFILE_KEY
    
    def load(self) -> UserProfile:
        """
        Read the stored profile
        
        A missing key is not an error: defaults apply. An unreadable value
        is logged and also replaced by defaults.
        """
        try:
            value = self.redis_client.get(self.key)
        except redis.RedisError as e:
            logger.error(f"Profile load error: {str(e)}")
            return UserProfile()
        
        if not value:
            logger.info(f"No stored profile under {self.key}, using defaults")
            return UserProfile()
        
        try:
            return UserProfile.model_validate_json(value)
        except ValidationError as e:
            logger.warning(f"Stored profile is malformed, using defaults: {str(e)}")
            return UserProfile()
    
    def save(self, profile: UserProfile) -> None:
        """Write the whole profile in one SET"""
        try:
            self.redis_client.set(self.key, profile.model_dump_json())
            logger.info(f"Profile saved: {self.key} (quizzes: {profile.total_quizzes})")
        except redis.RedisError as e:
            logger.error(f"Profile save error: {str(e)}")


def create_profile_store(redis_url: str = None, key: str = None):
    """Use Redis when reachable, otherwise keep the profile in memory"""
    try:
        redis_client = redis.from_url(
            redis_url or settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5
        )
        # Test connection
        redis_client.ping()
        logger.info("Redis connection established")
        return RedisProfileStore(redis_client, key)
    except Exception as e:
        logger.warning(f"Redis connection failed: {str(e)}. Profile kept in memory only.")
        return InMemoryProfileStore()
