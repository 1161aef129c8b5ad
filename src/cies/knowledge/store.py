# src/cies/knowledge/store.py

import logging
import os
import threading
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Set, Union

from dateutil import parser as date_parser

from cies.knowledge.codec import (
    COMMENT_MARKER,
    RULE_SEPARATOR,
    FactKey,
    decode_line,
    encode_fact,
    fact_key,
)
from cies.knowledge.filters import Condition, matches_all
from cies.knowledge.schema import Fact, FactValidationError

logger = logging.getLogger(__name__)

# One write lock per backing file, shared by every handle in the process
_WRITE_LOCKS: Dict[str, threading.Lock] = {}
_WRITE_LOCKS_GUARD = threading.Lock()


def _is_single_line(text: str) -> bool:
    return text.splitlines() in ([], [text])


def _write_lock_for(path: Path) -> threading.Lock:
    key = str(path.resolve())
    with _WRITE_LOCKS_GUARD:
        if key not in _WRITE_LOCKS:
            _WRITE_LOCKS[key] = threading.Lock()
        return _WRITE_LOCKS[key]


class FactStoreError(IOError):
    """Raised when a batch could not be appended to the backing file."""


class FactStore:
    """
    Append-only, human-readable fact store backed by a single text file.

    Every ``list()`` call decodes the whole file; there is no separate index.
    Appends are deduplicated against the persisted facts under normalized
    equality and written as one batch, serialized by a per-file write lock.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize the store handle.

        Args:
            path: Backing file path (created on first append)
        """
        self.path = Path(path)
        self._write_lock = _write_lock_for(self.path)

    def __repr__(self) -> str:
        return f"FactStore(path={str(self.path)!r})"

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _read_text(self) -> str:
        if not self.path.exists():
            return ""
        with open(self.path, "r", encoding="utf-8") as f:
            return f.read()

    def iter_facts(self) -> Iterator[Fact]:
        """Yield every decodable fact in file order, skipping malformed lines."""
        for line in self._read_text().splitlines():
            fact = decode_line(line)
            if fact is not None:
                yield fact

    def list(
        self,
        predicate: Optional[str] = None,
        conditions: Optional[Sequence[Condition]] = None,
    ) -> List[Fact]:
        """
        List stored facts matching an optional predicate and argument conditions.

        Args:
            predicate: Only return facts with this predicate name
            conditions: ArgumentFilter objects or (index, callable) pairs

        Returns:
            Matching facts in file order. Undecodable lines are left out.
        """
        return [
            fact
            for fact in self.iter_facts()
            if (predicate is None or fact.predicate == predicate)
            and matches_all(fact, conditions)
        ]

    def keys(self) -> Set[FactKey]:
        """Normalized identities of all persisted facts."""
        return {fact_key(fact) for fact in self.iter_facts()}

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @staticmethod
    def validate(fact: Fact) -> None:
        """
        Reject facts that would corrupt the text grammar for later readers.

        String arguments are always written quoted, so capitalized words are
        plain data. What is rejected is text the decoder would read back
        differently: a quote-leading string that pairs with a later
        ``'''`` into a legacy triple-quoted token, or a trailing backslash
        that escapes the closing quote.

        Raises:
            FactValidationError: On rule separators, line breaks or
                arguments that do not read back as written.
        """
        for position, arg in enumerate(fact.arguments):
            if not isinstance(arg, str):
                continue
            if RULE_SEPARATOR in arg:
                raise FactValidationError(
                    f"{fact.predicate}: argument {position} contains rule syntax '{RULE_SEPARATOR}'"
                )
            if not _is_single_line(arg):
                raise FactValidationError(
                    f"{fact.predicate}: argument {position} contains a line break"
                )

        if fact.comment and (
            RULE_SEPARATOR in fact.comment or not _is_single_line(fact.comment)
        ):
            raise FactValidationError(
                f"{fact.predicate}: comment contains rule syntax or a line break"
            )

        decoded = decode_line(encode_fact(fact))
        if decoded is None or decoded.arguments != fact.arguments:
            raise FactValidationError(
                f"{fact.predicate}: arguments would not read back as written"
            )

    def _format_batch(
        self,
        facts: Sequence[Fact],
        provenance: Optional[str],
        expires_at: Optional[str],
    ) -> str:
        timestamp = datetime.now(timezone.utc).isoformat()
        lines = ["", f"{COMMENT_MARKER} Added at {timestamp}"]
        if provenance:
            lines.append(f"{COMMENT_MARKER} Source: {provenance}")
        if expires_at:
            lines.append(f"{COMMENT_MARKER} Expires: {expires_at}")
        lines.extend(encode_fact(fact) for fact in facts)
        return "\n".join(lines) + "\n"

    @staticmethod
    def _format_expiration(expires_at: Union[date, datetime, str, None]) -> Optional[str]:
        if expires_at is None:
            return None
        if isinstance(expires_at, str):
            try:
                expires_at = date_parser.isoparse(expires_at)
            except ValueError as e:
                raise FactValidationError(f"Invalid expiration date '{expires_at}': {e}")
        if isinstance(expires_at, datetime):
            expires_at = expires_at.date()
        return expires_at.isoformat()

    def _write_batch(self, text: str) -> None:
        """Append text as one unbuffered write; roll the file back if it fails."""
        data = text.encode("utf-8")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "ab", buffering=0) as f:
            offset = f.seek(0, os.SEEK_END)
            try:
                written = 0
                while written < len(data):
                    written += f.write(data[written:])
                os.fsync(f.fileno())
            except OSError as e:
                logger.error(f"Append to {self.path} failed, rolling back: {e}")
                try:
                    f.truncate(offset)
                except OSError as rollback_error:
                    logger.error(f"Rollback of {self.path} failed: {rollback_error}")
                raise FactStoreError(f"Failed to append facts to {self.path}: {e}") from e

    def append(
        self,
        facts: Sequence[Fact],
        provenance: Optional[str] = None,
        expires_at: Union[date, datetime, str, None] = None,
    ) -> List[Fact]:
        """
        Append a batch of facts, dropping any that are already stored.

        Args:
            facts: Candidate facts
            provenance: Optional source label written as a ``% Source:`` line
            expires_at: Optional advisory expiration written as ``% Expires:``

        Returns:
            The facts actually written (possibly empty).

        Raises:
            FactValidationError: If any fact fails validation (nothing is written)
            FactStoreError: If the backing file could not be written
        """
        for fact in facts:
            self.validate(fact)
        if provenance and not _is_single_line(provenance):
            raise FactValidationError("provenance must be a single line")
        expiration = self._format_expiration(expires_at)

        try:
            with self._write_lock:
                seen = self.keys()
                fresh = []
                for fact in facts:
                    key = fact_key(fact)
                    if key in seen:
                        logger.debug(f"Dropping duplicate fact {encode_fact(fact)[:80]!r}")
                        continue
                    seen.add(key)
                    fresh.append(fact)

                if not fresh:
                    logger.info(f"All {len(facts)} facts already present in {self.path}")
                    return []

                self._write_batch(self._format_batch(fresh, provenance, expiration))
        except FactStoreError:
            raise
        except OSError as e:
            raise FactStoreError(f"Failed to access fact store {self.path}: {e}") from e

        logger.info(
            f"Appended {len(fresh)} facts to {self.path} "
            f"({len(facts) - len(fresh)} duplicates dropped)"
        )
        return fresh
