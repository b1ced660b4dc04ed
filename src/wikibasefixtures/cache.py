import logging
import os
import threading
from collections.abc import Callable, MutableMapping

from wikibasefixtures.wikibase import PROPERTY_ENV_PREFIX, WbiDataTypes

logger = logging.getLogger(__name__)


class PropertyIdCache:
    """
    Remembers the id of the property created for each datatype.
    By default the ids are stored in the process environment so that they are shared with everything running in
    the same process (and its child processes).
    """

    def __init__(self, store: MutableMapping[str, str] | None = None, prefix: str = PROPERTY_ENV_PREFIX):
        self.store: MutableMapping[str, str] = os.environ if store is None else store
        self.prefix = prefix
        self._locks: dict[str, threading.Lock] = dict()
        self._locks_guard = threading.Lock()

    def key_for(self, datatype: WbiDataTypes | str) -> str:
        """
        Get the store key of the given datatype e.g. string -> WIKIBASE_PROPERTY_STRING
        """
        if isinstance(datatype, WbiDataTypes):
            datatype = datatype.value
        return f"{self.prefix}{datatype.upper()}"

    def __contains__(self, datatype: WbiDataTypes | str) -> bool:
        return self.key_for(datatype) in self.store

    def get(self, datatype: WbiDataTypes | str) -> str | None:
        return self.store.get(self.key_for(datatype))

    def set(self, datatype: WbiDataTypes | str, property_id: str):
        self.store[self.key_for(datatype)] = property_id

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def get_or_create(self, datatype: WbiDataTypes | str, factory: Callable[[], str]) -> str:
        """
        Get the cached property id of the given datatype or create it with the given factory.
        The lookup and creation are done while holding the lock of the datatype so that concurrent callers
        create at most one property per datatype.
        :param datatype: datatype of the property
        :param factory: creates the property and returns its id
        :return: property id
        """
        key = self.key_for(datatype)
        with self._lock_for(key):
            property_id = self.store.get(key)
            if property_id is not None:
                logger.debug(f"Using cached property {property_id} ({key})")
                return property_id
            property_id = factory()
            self.store[key] = property_id
            logger.debug(f"Cached property {property_id} as {key}")
            return property_id
