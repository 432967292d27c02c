# ABOUTME: Best-effort per-visitor memory of the last generated letter and who was already emailed.
# ABOUTME: Backed by any mutable mapping (the Django session in views); reads and writes never raise.

from __future__ import annotations

import json
import logging
import re
import secrets
import string
import time
from typing import Any, Callable, Dict, Iterable, List, MutableMapping, Optional

from django.conf import settings

logger = logging.getLogger('advocacy.services')

LETTER_CACHE_KEY = 'letter-cache'
EMAILED_KEY = 'emailed-representatives'
LETTER_HISTORY_KEY = 'letter-history'
FORM_DRAFT_KEY = 'form-draft'

DAY = 24 * 60 * 60
DEFAULT_CACHE_DAYS = 7
DRAFT_EXPIRY_SECONDS = DAY
HISTORY_MAX_ITEMS = 50
HISTORY_FALLBACK_ITEMS = 20

_ID_ALPHABET = string.ascii_lowercase + string.digits


class BestEffortStore:
    """
    JSON values in a mapping, with failures reported as "nothing stored".

    ``get`` returns None for missing, unreadable or undecodable entries;
    ``set`` returns False instead of raising when the backend refuses a write.
    """

    def __init__(self, backend: Optional[MutableMapping]):
        self.backend = backend

    def get(self, key: str) -> Any:
        if self.backend is None:
            return None
        try:
            raw = self.backend.get(key)
            if raw is None:
                return None
            return json.loads(raw)
        except Exception as exc:
            logger.debug("Ignoring unreadable cache entry %s: %s", key, exc)
            return None

    def set(self, key: str, value: Any) -> bool:
        if self.backend is None:
            return False
        try:
            self.backend[key] = json.dumps(value)
            return True
        except Exception as exc:
            logger.debug("Could not write cache entry %s: %s", key, exc)
            return False

    def remove(self, key: str) -> None:
        if self.backend is None:
            return
        try:
            self.backend.pop(key, None)
        except Exception as exc:
            logger.debug("Could not remove cache entry %s: %s", key, exc)


def _attr(representative, name: str, default=''):
    if isinstance(representative, dict):
        return representative.get(name, default)
    return getattr(representative, name, default)


def _random_suffix(length: int) -> str:
    return ''.join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def generate_tracking_id(clock: Callable[[], float] = time.time) -> str:
    """Opaque id embedded in sent emails to count opens."""
    return f"t-{int(clock() * 1000)}-{_random_suffix(9)}"


def adapt_letter_for_representative(content: str, original_name: str, new_name: str) -> str:
    """
    Re-address a generated letter to another representative.

    Replaces the full name and the bare surname (on word boundaries) in one
    pass, so text that was just inserted is never matched again.
    Salutations that depend on the representative (e.g. gendered titles) are
    not rewritten.
    """
    if not content or not original_name or not new_name:
        return content or ''

    original_last = original_name.split(' ')[-1]
    new_last = new_name.split(' ')[-1]

    alternatives = [re.escape(original_name)]
    if original_last and new_last and original_last != new_last:
        alternatives.append(rf'\b{re.escape(original_last)}\b')

    def replacement(match):
        return new_name if match.group(0) == original_name else new_last

    return re.sub('|'.join(alternatives), replacement, content)


class LetterCache:
    """Letter reuse across several representatives of one district."""

    def __init__(self, backend: Optional[MutableMapping], clock: Callable[[], float] = time.time):
        self.store = BestEffortStore(backend)
        self.clock = clock
        self.expiry_seconds = getattr(settings, 'ADVOCACY_LETTER_CACHE_DAYS', DEFAULT_CACHE_DAYS) * DAY

    # -- current letter -------------------------------------------------

    def cache_letter(self, letter: Dict[str, Any]) -> Dict[str, Any]:
        now = self.clock()
        cached = dict(letter, created_at=now, last_used_at=now)
        self.store.set(LETTER_CACHE_KEY, cached)
        return cached

    def get_cached_letter(self) -> Optional[Dict[str, Any]]:
        cached = self.store.get(LETTER_CACHE_KEY)
        if not isinstance(cached, dict):
            return None
        created_at = cached.get('created_at')
        if not isinstance(created_at, (int, float)):
            return None
        if self.clock() - created_at > self.expiry_seconds:
            self.store.remove(LETTER_CACHE_KEY)
            return None
        return cached

    def touch_cached_letter(self) -> None:
        cached = self.get_cached_letter()
        if cached is None:
            return
        cached['last_used_at'] = self.clock()
        self.store.set(LETTER_CACHE_KEY, cached)

    def clear_cached_letter(self) -> None:
        self.store.remove(LETTER_CACHE_KEY)

    # -- emailed representatives ---------------------------------------

    def get_emailed(self) -> List[Dict[str, Any]]:
        emailed = self.store.get(EMAILED_KEY)
        if not isinstance(emailed, list):
            return []
        return [entry for entry in emailed if isinstance(entry, dict)]

    def mark_emailed(self, representative) -> None:
        representative_id = str(_attr(representative, 'id'))
        emailed = self.get_emailed()
        if any(entry.get('representative_id') == representative_id for entry in emailed):
            return
        emailed.append({
            'representative_id': representative_id,
            'representative_name': _attr(representative, 'name'),
            'party': _attr(representative, 'party'),
            'emailed_at': self.clock(),
        })
        self.store.set(EMAILED_KEY, emailed)

    def has_been_emailed(self, representative_id) -> bool:
        representative_id = str(representative_id)
        return any(entry.get('representative_id') == representative_id for entry in self.get_emailed())

    def remaining_representatives(self, representatives: Iterable) -> List:
        emailed_ids = {entry.get('representative_id') for entry in self.get_emailed()}
        return [rep for rep in representatives if str(_attr(rep, 'id')) not in emailed_ids]

    def clear_emailed(self) -> None:
        self.store.remove(EMAILED_KEY)

    def get_stats(self) -> Dict[str, Optional[float]]:
        emailed = self.get_emailed()
        cached = self.get_cached_letter()
        timestamps = [entry['emailed_at'] for entry in emailed if isinstance(entry.get('emailed_at'), (int, float))]
        return {
            'total_emailed': len(emailed),
            'last_emailed_at': max(timestamps) if timestamps else None,
            'cached_letter_age': self.clock() - cached['created_at'] if cached else None,
        }

    # -- history --------------------------------------------------------

    def get_history(self) -> List[Dict[str, Any]]:
        history = self.store.get(LETTER_HISTORY_KEY)
        if not isinstance(history, list):
            return []
        return [entry for entry in history if isinstance(entry, dict)]

    def add_to_history(self, letter: Dict[str, Any]) -> str:
        now = self.clock()
        letter_id = f"letter-{int(now * 1000)}-{_random_suffix(7)}"
        entry = dict(letter, id=letter_id, created_at=now)
        entry.setdefault('email_sent', False)

        history = [entry] + self.get_history()
        trimmed = history[:HISTORY_MAX_ITEMS]
        if not self.store.set(LETTER_HISTORY_KEY, trimmed):
            self.store.set(LETTER_HISTORY_KEY, trimmed[:HISTORY_FALLBACK_ITEMS])
        return letter_id

    def get_history_letter(self, letter_id: str) -> Optional[Dict[str, Any]]:
        for entry in self.get_history():
            if entry.get('id') == letter_id:
                return entry
        return None

    def mark_letter_as_sent(self, letter_id: str) -> None:
        history = self.get_history()
        for entry in history:
            if entry.get('id') == letter_id:
                entry['email_sent'] = True
                entry['email_sent_at'] = self.clock()
                self.store.set(LETTER_HISTORY_KEY, history)
                return

    def delete_from_history(self, letter_id: str) -> None:
        history = [entry for entry in self.get_history() if entry.get('id') != letter_id]
        self.store.set(LETTER_HISTORY_KEY, history)

    def clear_history(self) -> None:
        self.store.remove(LETTER_HISTORY_KEY)

    # -- form draft -----------------------------------------------------

    def save_form_draft(self, draft: Dict[str, Any]) -> None:
        self.store.set(FORM_DRAFT_KEY, dict(draft, saved_at=self.clock()))

    def get_form_draft(self) -> Optional[Dict[str, Any]]:
        draft = self.store.get(FORM_DRAFT_KEY)
        if not isinstance(draft, dict) or not isinstance(draft.get('saved_at'), (int, float)):
            return None
        if self.clock() - draft['saved_at'] > DRAFT_EXPIRY_SECONDS:
            self.clear_form_draft()
            return None
        return draft

    def clear_form_draft(self) -> None:
        self.store.remove(FORM_DRAFT_KEY)

    def has_saved_draft(self) -> bool:
        return self.get_form_draft() is not None
