import json
import logging
import threading
import time

from cardmatch.classification.mcc import mccs_for_taxonomy
from cardmatch.domain.models import Business, Classification, Taxonomy

logger = logging.getLogger(__name__)

ALLOWED_TAXONOMIES = [taxonomy.value for taxonomy in Taxonomy]
CACHE_MAX_SIZE = 500
CACHE_TTL_SECONDS = 24 * 60 * 60
LLM_CONFIDENCE = 0.75


class LLMClassificationError(ValueError):
    pass


class LLMRefiner:
    """Re-classifies low-confidence businesses with an OpenAI chat model.

    Never sets a brand and never raises: any failure returns the rule-based
    classification unchanged.
    """

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", threshold: float = 0.7, client=None):
        self.api_key = api_key.strip()
        self.model = model
        self.threshold = threshold
        self._client = client
        self._cache: dict[str, tuple[float, Taxonomy]] = {}
        self._cache_lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return bool(self.api_key) or self._client is not None

    def _get_client(self):
        if self._client is None:
            try:
                from openai import OpenAI
            except ImportError as exc:
                raise LLMClassificationError(
                    "openai package is required for LLM classification. Install with: pip install -e '.[llm]'"
                ) from exc
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    @staticmethod
    def _cache_key(business: Business) -> str:
        return f"{business.name.lower().strip()}|{','.join(sorted(business.provider_types))}"

    def _cache_get(self, key: str) -> Taxonomy | None:
        with self._cache_lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            stored_at, taxonomy = entry
            if time.monotonic() - stored_at > CACHE_TTL_SECONDS:
                self._cache.pop(key, None)
                return None
            return taxonomy

    def _cache_set(self, key: str, taxonomy: Taxonomy) -> None:
        with self._cache_lock:
            if key not in self._cache and len(self._cache) >= CACHE_MAX_SIZE:
                oldest = min(self._cache, key=lambda k: self._cache[k][0])
                self._cache.pop(oldest, None)
            self._cache[key] = (time.monotonic(), taxonomy)

    def _ask(self, business: Business) -> Taxonomy:
        system_prompt = (
            "You categorize merchants for credit card rewards. "
            "Return JSON only with key: taxonomy. "
            f"taxonomy must be one of: {', '.join(ALLOWED_TAXONOMIES)}. "
            "Use 'other' when unsure."
        )
        details = [f"Business name: {business.name}"]
        if business.provider_types:
            details.append(f"Place types: {', '.join(business.provider_types)}")
        if business.address:
            details.append(f"Address: {business.address}")

        response = self._get_client().chat.completions.create(
            model=self.model,
            temperature=0,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": "\n".join(details)},
            ],
        )

        content = response.choices[0].message.content
        if not content:
            raise LLMClassificationError("LLM returned empty content.")

        value = str(json.loads(content).get("taxonomy", "")).strip().lower()
        if value not in ALLOWED_TAXONOMIES:
            raise LLMClassificationError(f"LLM returned unknown taxonomy '{value}'.")
        return Taxonomy(value)

    def refine(self, business: Business, classification: Classification) -> Classification:
        if not self.enabled or classification.brand_id or classification.confidence >= self.threshold:
            return classification

        key = self._cache_key(business)
        taxonomy = self._cache_get(key)
        if taxonomy is None:
            try:
                taxonomy = self._ask(business)
            except Exception:
                logger.warning("LLM classification failed for %r, keeping rule result", business.name, exc_info=True)
                return classification
            self._cache_set(key, taxonomy)

        return Classification(
            taxonomy=taxonomy,
            confidence=max(classification.confidence, LLM_CONFIDENCE),
            mcc_candidates=mccs_for_taxonomy(taxonomy),
            source="llm",
        )
