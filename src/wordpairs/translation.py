"""Look up English translations for extracted nouns over HTTP."""
from __future__ import annotations

import logging
import os
import re
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Sequence

import requests

from wordpairs.extractor import Entry

LOGGER = logging.getLogger(__name__)
MYMEMORY_URL = os.environ.get("MYMEMORY_URL", "https://api.mymemory.translated.net/get")
MT_DEFAULT_URL = os.environ.get("LIBRETRANSLATE_URL")
MT_API_KEY = os.environ.get("LIBRETRANSLATE_API_KEY")
DEFAULT_TIMEOUT = 20
DEFAULT_MAX_ATTEMPTS = 2
DEFAULT_BACKOFF_SECONDS = 0.3


class TranslationError(Exception):
    """Raised when a translation service cannot produce a usable answer."""


class MyMemoryClient:
    def __init__(
        self,
        url: str = MYMEMORY_URL,
        langpair: str = "de|en",
        *,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url
        self.langpair = langpair
        self.timeout = timeout
        self.session = session or requests.Session()

    def translate(self, text: str) -> str:
        try:
            response = self.session.get(
                self.url,
                params={"q": text, "langpair": self.langpair},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as exc:
            raise TranslationError(str(exc)) from exc
        except ValueError as exc:
            raise TranslationError(f"Malformed response: {exc}") from exc
        if not isinstance(data, dict):
            raise TranslationError("Malformed response: expected a JSON object")
        translated = ""
        response_data = data.get("responseData") or {}
        if isinstance(response_data, dict) and response_data.get("translatedText"):
            translated = response_data["translatedText"]
        else:
            matches = data.get("matches") or []
            if matches and isinstance(matches[0], dict):
                translated = matches[0].get("translation") or ""
        return str(translated).strip()


class LibreTranslateClient:
    def __init__(
        self,
        url: str,
        api_key: Optional[str] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        max_variants: int = 2,
    ) -> None:
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()
        self.max_variants = max_variants

    def translate(self, text: str, source: str = "de", target: str = "en") -> str:
        payload = {"q": text, "source": source, "target": target, "format": "text"}
        if self.api_key:
            payload["api_key"] = self.api_key
        try:
            response = self.session.post(f"{self.url}/translate", data=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as exc:
            raise TranslationError(str(exc)) from exc
        except ValueError as exc:
            raise TranslationError(f"Malformed response: {exc}") from exc
        if not isinstance(data, dict):
            raise TranslationError("Malformed response: expected a JSON object")
        translation = data.get("translatedText") or data.get("translated_text") or ""
        variants = [
            variant.strip()
            for variant in re.split(r"[,;/]", translation)
            if variant.strip()
        ]
        return "; ".join(variants[: self.max_variants])


def build_client(
    mt_url: Optional[str] = None,
    mt_api_key: Optional[str] = None,
    mymemory_url: Optional[str] = None,
):
    url = mt_url or MT_DEFAULT_URL
    if url:
        LOGGER.info("Using LibreTranslate at %s", url)
        return LibreTranslateClient(url, mt_api_key or MT_API_KEY)
    return MyMemoryClient(mymemory_url or MYMEMORY_URL)


@dataclass
class TranslationReport:
    entries: List[Entry]
    translated: int = 0
    failed: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class NounTranslator:
    """Translate nouns one request at a time, remembering every answer.

    Failed lookups are retried with a linear backoff and, once the attempts
    run out, cached as an empty translation so the noun is not requested
    again.
    """

    def __init__(
        self,
        client,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.client = client
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.sleep = sleep
        self.cache: Dict[str, str] = {}

    def _fetch(self, noun: str) -> Optional[str]:
        """Ask the client for ``noun``; ``None`` once every attempt has failed."""
        for attempt in range(1, self.max_attempts + 1):
            try:
                return self.client.translate(noun)
            except TranslationError as exc:
                if attempt == self.max_attempts:
                    LOGGER.warning("Translation failed for %r (%s)", noun, exc)
                    return None
                LOGGER.debug("Attempt %s for %r failed: %s", attempt, noun, exc)
                self.sleep(self.backoff_seconds * attempt)
        return None

    def lookup(self, noun: str) -> str:
        if not noun:
            return ""
        if noun not in self.cache:
            self.cache[noun] = self._fetch(noun) or ""
        return self.cache[noun]

    def translate_entries(
        self,
        entries: Sequence[Entry],
        *,
        only_missing: bool = False,
        progress: Optional[Callable[[int, int, str], None]] = None,
    ) -> TranslationReport:
        nouns: List[str] = []
        for entry in entries:
            if only_missing and entry.english:
                continue
            if entry.noun not in nouns:
                nouns.append(entry.noun)
        failed: List[str] = []
        results: Dict[str, str] = {}
        for index, noun in enumerate(nouns, start=1):
            if progress:
                progress(index, len(nouns), noun)
            if noun in self.cache:
                results[noun] = self.cache[noun]
                continue
            fetched = self._fetch(noun)
            if fetched is None:
                failed.append(noun)
            results[noun] = self.cache[noun] = fetched or ""
        translated = []
        for entry in entries:
            if entry.noun not in results or (only_missing and entry.english):
                translated.append(entry)
                continue
            translated.append(replace(entry, english=results[entry.noun]))
        report = TranslationReport(
            entries=translated,
            translated=sum(1 for noun in nouns if results[noun]),
            failed=failed,
        )
        if report.ok:
            LOGGER.info("Translation complete: %s/%s nouns translated", report.translated, len(nouns))
        else:
            LOGGER.warning(
                "Translation finished with %s failure(s): %s",
                len(report.failed),
                ", ".join(report.failed),
            )
        return report
