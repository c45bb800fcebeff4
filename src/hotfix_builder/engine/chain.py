"""Ordered commit chains of pull requests and the plan-wide fingerprint index."""

import logging
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from .fingerprint import commit_fingerprint
from .models import ChainEntry, ChangeRequest, Commit

logger = logging.getLogger(__name__)


def _freeze(index: Dict[int, List[ChainEntry]]) -> Mapping[int, Tuple[ChainEntry, ...]]:
    return MappingProxyType({fp: tuple(entries) for fp, entries in index.items()})


class ChangeRequestCommitChain:
    """The commits of one pull request in their original authoring order.

    Entries know their position, so adjacency is derived from the chain
    instead of being stored on the entries themselves.
    """

    def __init__(self, change_request: ChangeRequest, entries: Sequence[ChainEntry]):
        self.change_request = change_request
        self._entries: Tuple[ChainEntry, ...] = tuple(entries)

        index: Dict[int, List[ChainEntry]] = {}
        for entry in self._entries:
            index.setdefault(entry.fingerprint, []).append(entry)
        self._index = _freeze(index)

    @classmethod
    def build(
        cls, change_request: ChangeRequest, commits: Iterable[Commit]
    ) -> "ChangeRequestCommitChain":
        """Build a chain from the oldest-first commits of a pull request."""
        entries = []
        for position, commit in enumerate(commits):
            if commit.author_date is None:
                logger.warning(
                    f"Commit {commit.short_id} of PR {change_request.label} has no "
                    f"author date, fingerprint is built from the message only"
                )
            entries.append(
                ChainEntry(
                    change_request=change_request,
                    commit=commit,
                    fingerprint=commit_fingerprint(commit),
                    position=position,
                )
            )

        chain = cls(change_request, entries)
        logger.debug(f"Built chain for PR {change_request.label} with {len(chain)} commits")
        return chain

    @property
    def entries(self) -> Tuple[ChainEntry, ...]:
        return self._entries

    @property
    def index(self) -> Mapping[int, Tuple[ChainEntry, ...]]:
        """Fingerprint to entries of this chain, in chain order."""
        return self._index

    @property
    def head(self) -> Optional[ChainEntry]:
        return self._entries[0] if self._entries else None

    @property
    def tail(self) -> Optional[ChainEntry]:
        return self._entries[-1] if self._entries else None

    def previous(self, entry: ChainEntry) -> Optional[ChainEntry]:
        self._check_owned(entry)
        if entry.position == 0:
            return None
        return self._entries[entry.position - 1]

    def next(self, entry: ChainEntry) -> Optional[ChainEntry]:
        self._check_owned(entry)
        if entry.position + 1 >= len(self._entries):
            return None
        return self._entries[entry.position + 1]

    def _check_owned(self, entry: ChainEntry) -> None:
        if (
            entry.position >= len(self._entries)
            or self._entries[entry.position] != entry
        ):
            raise ValueError(
                f"Commit {entry.commit.short_id} does not belong to the chain of "
                f"PR {self.change_request.label}"
            )

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ChainEntry]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return (
            f"ChangeRequestCommitChain(change_request={self.change_request.label}, "
            f"commits={len(self._entries)})"
        )


class FingerprintIndex:
    """Immutable plan-wide mapping of fingerprints to chain entries.

    Colliding entries are all kept, in the order of the chains passed in and
    then by position within each chain.
    """

    def __init__(self, entries: Mapping[int, Tuple[ChainEntry, ...]]):
        self._entries = MappingProxyType(dict(entries))

    @classmethod
    def from_chains(cls, chains: Iterable[ChangeRequestCommitChain]) -> "FingerprintIndex":
        index: Dict[int, List[ChainEntry]] = {}
        for chain in chains:
            for entry in chain:
                index.setdefault(entry.fingerprint, []).append(entry)

        built = cls(_freeze(index))
        for fp, colliding in built.collisions().items():
            owners = ", ".join(entry.change_request.label for entry in colliding)
            logger.warning(
                f"Fingerprint {fp:#010x} is shared by {len(colliding)} commits "
                f"({owners}); they are matched in that order"
            )
        return built

    def get(self, fp: int) -> Tuple[ChainEntry, ...]:
        return self._entries.get(fp, ())

    def collisions(self) -> Dict[int, Tuple[ChainEntry, ...]]:
        return {fp: entries for fp, entries in self._entries.items() if len(entries) > 1}

    def entries(self) -> Iterator[ChainEntry]:
        """All indexed entries, grouped by fingerprint in insertion order."""
        for group in self._entries.values():
            yield from group

    def __contains__(self, fp: object) -> bool:
        return fp in self._entries

    def __len__(self) -> int:
        return sum(len(group) for group in self._entries.values())
