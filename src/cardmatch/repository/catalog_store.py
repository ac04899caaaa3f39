import asyncio
import hashlib
import json
import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from cardmatch.domain.errors import CatalogConfigError
from cardmatch.domain.models import CardRule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogSnapshot:
    cards: tuple[CardRule, ...]
    version: str
    loaded_at: float = field(default_factory=time.monotonic)

    def __len__(self) -> int:
        return len(self.cards)


class CardCatalogStore:
    def __init__(self, catalog_file: str):
        self.catalog_file = Path(catalog_file)

    def _read(self) -> bytes:
        if not self.catalog_file.exists():
            raise CatalogConfigError(f"Card catalog not found: {self.catalog_file}")
        try:
            return self.catalog_file.read_bytes()
        except OSError as exc:
            raise CatalogConfigError(f"Card catalog {self.catalog_file} could not be read: {exc}") from exc

    @staticmethod
    def _parse(raw: bytes, source: Path) -> list[CardRule]:
        try:
            data = json.loads(raw)
        except ValueError as exc:
            # JSONDecodeError and UnicodeDecodeError are both ValueErrors.
            raise CatalogConfigError(f"Card catalog {source} is not valid UTF-8 JSON: {exc}") from exc

        if not isinstance(data, list):
            raise CatalogConfigError(f"Card catalog {source} must be a JSON list of cards.")

        cards: list[CardRule] = []
        seen: set[str] = set()
        for index, item in enumerate(data):
            try:
                card = CardRule.model_validate(item)
            except PydanticValidationError as exc:
                raise CatalogConfigError(f"Invalid card at index {index} in {source}: {exc}") from exc
            if card.id in seen:
                raise CatalogConfigError(f"Duplicate card id '{card.id}' in {source}")
            seen.add(card.id)
            cards.append(card)

        if not cards:
            raise CatalogConfigError(f"Card catalog {source} is empty.")
        return cards

    def load_catalog(self) -> list[CardRule]:
        return self._parse(self._read(), self.catalog_file)

    def load_snapshot(self) -> CatalogSnapshot:
        raw = self._read()
        cards = self._parse(raw, self.catalog_file)
        version = hashlib.sha256(raw).hexdigest()[:12]
        return CatalogSnapshot(cards=tuple(cards), version=version)


class CatalogProvider:
    """Holds the current catalog snapshot and swaps it wholesale on refresh.

    Readers take ``snapshot()`` once per request and keep using that object,
    so a concurrent refresh never exposes a half-loaded catalog.
    """

    def __init__(self, store: CardCatalogStore, ttl_seconds: float = 300):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self._snapshot: CatalogSnapshot | None = None
        self._lock = threading.Lock()

    def snapshot(self) -> CatalogSnapshot:
        current = self._snapshot
        if current is not None:
            return current
        with self._lock:
            if self._snapshot is None:
                self._snapshot = self.store.load_snapshot()
                logger.info("Loaded card catalog %s (%d cards)", self._snapshot.version, len(self._snapshot))
            return self._snapshot

    def is_stale(self) -> bool:
        current = self._snapshot
        return current is None or time.monotonic() - current.loaded_at >= self.ttl_seconds

    def refresh(self) -> CatalogSnapshot:
        """Reload from disk. Before the first successful load, errors propagate."""
        try:
            fresh = self.store.load_snapshot()
        except CatalogConfigError:
            if self._snapshot is None:
                raise
            logger.exception("Catalog reload failed, keeping version %s", self._snapshot.version)
            return self._snapshot

        with self._lock:
            previous = self._snapshot
            self._snapshot = fresh
        if previous is None or previous.version != fresh.version:
            logger.info("Card catalog now at version %s (%d cards)", fresh.version, len(fresh))
        return fresh

    async def run_reload_loop(self) -> None:
        while True:
            await asyncio.sleep(self.ttl_seconds)
            if self.is_stale():
                await asyncio.to_thread(self.refresh)
