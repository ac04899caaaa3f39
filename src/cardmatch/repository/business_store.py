import json
import logging
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError

from cardmatch.domain.errors import UpstreamLookupError
from cardmatch.domain.models import Business

logger = logging.getLogger(__name__)


class BusinessStore(Protocol):
    def find_by_id(self, business_id: str) -> Business | None:
        """Return the business or None when the id is unknown."""


class InMemoryBusinessStore:
    def __init__(self, businesses: list[Business] | None = None):
        self._businesses = {item.id: item for item in businesses or []}

    def find_by_id(self, business_id: str) -> Business | None:
        return self._businesses.get(business_id)


class JsonBusinessStore:
    """Read-only store backed by a JSON list of businesses.

    The file is read on every lookup so edits are picked up without a restart.
    A missing file is an empty store.
    """

    def __init__(self, store_file: str):
        self.store_file = Path(store_file)

    def find_by_id(self, business_id: str) -> Business | None:
        if not self.store_file.exists():
            logger.debug("Business store %s does not exist", self.store_file)
            return None

        try:
            with self.store_file.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            raise UpstreamLookupError(f"Could not read business store {self.store_file}: {exc}") from exc

        if not isinstance(data, list):
            raise UpstreamLookupError(f"Business store {self.store_file} must be a JSON list.")

        for item in data:
            if not isinstance(item, dict) or item.get("id") != business_id:
                continue
            try:
                return Business.model_validate(item)
            except PydanticValidationError as exc:
                raise UpstreamLookupError(f"Malformed business record '{business_id}': {exc}") from exc
        return None
