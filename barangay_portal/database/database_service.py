from typing import Any, Callable, Dict, Optional, Tuple
import logging

from firebase_admin import db

from ..core.firebase_init import initialize_firebase, is_firebase_available

logger = logging.getLogger(__name__)


class DatabaseService:
    """
    Thin async wrapper over the Firebase Realtime Database tree.

    Every method returns a tuple whose first item is a success flag and whose
    last item is an error message (None on success), so callers decide whether
    a failure is fatal.
    """

    def __init__(self):
        if not is_firebase_available():
            initialize_firebase()

    def _ref(self, path: str = "/"):
        return db.reference(path or "/")

    async def get(self, path: str) -> Tuple[bool, Any, Optional[str]]:
        """Read the entire subtree at `path`. Missing paths read as None."""
        try:
            return True, self._ref(path).get(), None
        except Exception as e:
            logger.error(f"Error reading {path}: {str(e)}")
            return False, None, str(e)

    async def count(self, path: str) -> Tuple[bool, int, Optional[str]]:
        """Count direct children of `path` without downloading them."""
        try:
            children = self._ref(path).get(shallow=True)
            return True, len(children) if isinstance(children, dict) else 0, None
        except Exception as e:
            logger.error(f"Error counting {path}: {str(e)}")
            return False, 0, str(e)

    async def set(self, path: str, value: Any) -> Tuple[bool, Optional[str]]:
        """Replace the value at `path`."""
        try:
            self._ref(path).set(value)
            return True, None
        except Exception as e:
            logger.error(f"Error writing {path}: {str(e)}")
            return False, str(e)

    async def push(self, path: str, value: Any) -> Tuple[bool, Optional[str], Optional[str]]:
        """Append `value` under a new push key and return the key."""
        try:
            new_ref = self._ref(path).push(value)
            return True, new_ref.key, None
        except Exception as e:
            logger.error(f"Error pushing to {path}: {str(e)}")
            return False, None, str(e)

    async def update(self, path: str, values: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
        """Merge `values` into the node at `path`."""
        try:
            self._ref(path).update(values)
            return True, None
        except Exception as e:
            logger.error(f"Error updating {path}: {str(e)}")
            return False, str(e)

    async def delete(self, path: str) -> Tuple[bool, Optional[str]]:
        try:
            self._ref(path).delete()
            return True, None
        except Exception as e:
            logger.error(f"Error deleting {path}: {str(e)}")
            return False, str(e)

    async def query_by_child(self, path: str, child: str, value: Any) -> Tuple[bool, Dict[str, Any], Optional[str]]:
        """Equality-filtered scan of the children of `path` on a named child field."""
        try:
            result = self._ref(path).order_by_child(child).equal_to(value).get()
            return True, dict(result or {}), None
        except Exception as e:
            logger.error(f"Error querying {path} by {child}: {str(e)}")
            return False, {}, str(e)

    async def multi_path_update(self, updates: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
        """
        Apply several absolute-path writes in a single request. A None value
        deletes that path. The server applies all of them or none.
        """
        try:
            self._ref("/").update(updates)
            return True, None
        except Exception as e:
            logger.error(f"Error applying multi-path update ({len(updates)} paths): {str(e)}")
            return False, str(e)

    async def transaction(self, path: str, fn: Callable[[Any], Any]) -> Tuple[bool, Any, Optional[str]]:
        """Run an atomic read-modify-write on `path` and return the committed value."""
        try:
            return True, self._ref(path).transaction(fn), None
        except Exception as e:
            logger.error(f"Transaction on {path} failed: {str(e)}")
            return False, None, str(e)


database_service = DatabaseService()
