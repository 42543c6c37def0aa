"""
Sector-aware intent detection.

Regex pattern sets are keyed "{sector}_{language}" and cached. They come
from the sector_intent_patterns table when it has rows for the pair, and
from the built-in defaults otherwise. When the regexes produce UNKNOWN and
a model-backed classifier is configured, it gets one chance to pick an
intent from the sector's list.
"""

import asyncio
import logging
import re
from typing import Optional, Pattern

from callcenter.agents.catalog import intents_for_sector
from callcenter.db.models import SectorIntentPattern
from callcenter.orchestrator.patterns import (
    ENTITY_PATTERNS,
    GENERIC_INTENT_PATTERNS,
    SECTOR_INTENT_PATTERNS,
    compile_patterns,
    normalize_db_regex,
)
from callcenter.shared.cache import TTLCache
from callcenter.shared.constants import (
    DEFAULT_LANGUAGE,
    DEFAULT_SECTOR,
    GREETING_MAX_LENGTH,
    INTENT_CACHE_TTL_SECONDS,
)
from callcenter.shared.interfaces import IIntentClassifier
from callcenter.shared.models import Intent, IntentResult

logger = logging.getLogger(__name__)

PatternSet = dict[str, list[Pattern]]

_GENERIC = (Intent.GREETING, Intent.CANCEL_ACTION, Intent.ESCALATION)

LLM_CONFIDENCE = 0.6


class IntentDetector:
    """Classifies a caller utterance into an intent plus extracted entities."""

    def __init__(
        self,
        session_factory=None,
        cache_ttl: float = INTENT_CACHE_TTL_SECONDS,
        llm_classifier: Optional[IIntentClassifier] = None,
    ):
        self._session_factory = session_factory
        self._cache = TTLCache(default_ttl=cache_ttl)
        self._llm = llm_classifier
        self._default_cache: dict[str, PatternSet] = {}
        self._entity_cache: dict[str, PatternSet] = {}

    # --- Pattern loading ---

    def get_default_patterns(self, sector: str, language: str = DEFAULT_LANGUAGE) -> PatternSet:
        """Generic intents merged with the sector's built-in intents."""
        if sector not in self._default_cache:
            raw = dict(GENERIC_INTENT_PATTERNS)
            raw.update(SECTOR_INTENT_PATTERNS.get(sector, {}))
            self._default_cache[sector] = compile_patterns(raw)
        return self._default_cache[sector]

    def get_entity_patterns(self, sector: str) -> PatternSet:
        if sector not in self._entity_cache:
            raw = ENTITY_PATTERNS.get(sector, ENTITY_PATTERNS[DEFAULT_SECTOR])
            self._entity_cache[sector] = compile_patterns(raw)
        return self._entity_cache[sector]

    def _load_patterns_from_db(self, sector: str, language: str) -> Optional[PatternSet]:
        with self._session_factory() as session:
            rows = (
                session.query(SectorIntentPattern)
                .filter(
                    SectorIntentPattern.sector == sector,
                    SectorIntentPattern.language == language,
                )
                .order_by(SectorIntentPattern.priority.asc(), SectorIntentPattern.id.asc())
                .all()
            )

        if not rows:
            return None

        patterns: PatternSet = {
            name: compiled
            for name, compiled in compile_patterns(GENERIC_INTENT_PATTERNS).items()
        }
        for row in rows:
            try:
                regex = re.compile(normalize_db_regex(row.regex_pattern), re.IGNORECASE)
            except re.error as e:
                logger.warning(f"Skipping bad pattern for {sector}/{row.intent}: {e}")
                continue
            if row.intent in _GENERIC:
                patterns[row.intent].append(regex)
            else:
                patterns.setdefault(row.intent, []).append(regex)

        logger.debug(f"Loaded {len(rows)} intent patterns for {sector}/{language} from database")
        return patterns

    async def get_patterns(self, sector: str, language: str = DEFAULT_LANGUAGE) -> PatternSet:
        """Cached pattern set for a sector/language; DB rows win over defaults."""
        async def fetch() -> PatternSet:
            if self._session_factory is not None:
                loaded = await asyncio.to_thread(self._load_patterns_from_db, sector, language)
                if loaded:
                    return loaded
            return self.get_default_patterns(sector, language)

        return await self._cache.get_or_set(f"{sector}_{language}", fetch)

    # --- Detection ---

    @staticmethod
    def _matches(text: str, patterns: PatternSet, intent: str) -> bool:
        return any(p.search(text) for p in patterns.get(intent, ()))

    def extract_entities(self, text: str, sector: str = DEFAULT_SECTOR) -> dict:
        """First matching pattern per entity; the last capture group, or the whole match."""
        entities = {}
        for entity_type, patterns in self.get_entity_patterns(sector).items():
            for pattern in patterns:
                match = pattern.search(text)
                if match:
                    groups = match.groups()
                    entities[entity_type] = groups[-1] if groups and groups[-1] else match.group(0)
                    break
        return entities

    def detect(
        self,
        transcript: str,
        sector: str = DEFAULT_SECTOR,
        language: str = DEFAULT_LANGUAGE,
        patterns: Optional[PatternSet] = None,
    ) -> IntentResult:
        text = (transcript or "").lower().strip()
        if patterns is None:
            patterns = self.get_default_patterns(sector, language)

        if self._matches(text, patterns, Intent.CANCEL_ACTION):
            return IntentResult(
                intent=Intent.CANCEL_ACTION, confidence=0.95, sector=sector,
                should_cancel_agent=True,
            )

        if self._matches(text, patterns, Intent.ESCALATION):
            return IntentResult(
                intent=Intent.ESCALATION, confidence=0.9, sector=sector,
                should_escalate=True,
            )

        if len(text) < GREETING_MAX_LENGTH and self._matches(text, patterns, Intent.GREETING):
            return IntentResult(intent=Intent.GREETING, confidence=0.9, sector=sector)

        for intent in patterns:
            if intent in _GENERIC:
                continue
            if self._matches(text, patterns, intent):
                return IntentResult(
                    intent=intent, confidence=0.85, sector=sector,
                    entities=self.extract_entities(text, sector),
                    requires_agent=True,
                )

        return IntentResult(
            intent=Intent.UNKNOWN, confidence=0.3, sector=sector, should_escalate=True,
        )

    async def detect_async(
        self,
        transcript: str,
        sector: str = DEFAULT_SECTOR,
        language: str = DEFAULT_LANGUAGE,
    ) -> IntentResult:
        """Detect with DB-backed patterns, then try the model on UNKNOWN."""
        try:
            patterns = await self.get_patterns(sector, language)
            result = self.detect(transcript, sector, language, patterns=patterns)
        except Exception as e:
            logger.warning(f"Pattern load failed for {sector}/{language}, using defaults: {e}")
            result = self.detect(transcript, sector, language)

        if result.intent != Intent.UNKNOWN or self._llm is None:
            return result

        intents = intents_for_sector(sector)
        chosen = await self._llm.classify(transcript, sector, intents)
        if chosen not in intents:
            return result

        logger.info(f"Model classified utterance as {chosen} ({sector})")
        return IntentResult(
            intent=chosen, confidence=LLM_CONFIDENCE, sector=sector,
            entities=self.extract_entities(transcript.lower().strip(), sector),
            requires_agent=True, source="llm",
        )

    def clear_cache(self) -> int:
        count = self._cache.clear()
        logger.debug("Intent pattern cache cleared")
        return count

    def cache_stats(self) -> dict:
        return self._cache.stats()
