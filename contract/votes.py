"""Vote contract: one vote per voter, keyed by voter ID in the World State."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Sequence

from ledger.transaction import TransactionContext

from .encoding import canonical_encode, decode_record, decode_vote, raw_text
from .errors import AlreadyExistsError, DecodeError, NotFoundError
from .registry import TransactionInfo, collect_transactions, transaction
from .schemas import Decoded, Raw, ScanEntry, Vote

logger = logging.getLogger(__name__)

# Empty bounds cover every key the contract has written.
FULL_RANGE = ("", "")

DEFAULT_VOTES: tuple[Vote, ...] = (
    Vote(voter_id="voter1", candidate_id="candidate1", station="station1"),
    Vote(voter_id="voter2", candidate_id="candidate2", station="station2"),
)


class VoteContract:
    """Smart contract for a voting application."""

    seed_votes: tuple[Vote, ...]

    def __init__(self, seed_votes: Sequence[Vote] | None = None) -> None:
        self.seed_votes = tuple(seed_votes) if seed_votes is not None else DEFAULT_VOTES

    @classmethod
    def transactions(cls) -> dict[str, TransactionInfo]:
        return collect_transactions(cls)

    def _get_raw(self, ctx: TransactionContext, voter_id: str) -> bytes | None:
        # No vote can be stored under an empty voter ID.
        if not voter_id:
            return None
        return ctx.stub.get_state(voter_id)

    def _put_vote(self, ctx: TransactionContext, vote: Vote) -> None:
        ctx.stub.put_state(vote.voter_id, canonical_encode(vote))
        logger.debug(f"Stored vote from {vote.voter_id} in {ctx.tx_id}")

    @transaction("InitLedger")
    def init_ledger(self, ctx: TransactionContext) -> None:
        """Seed the ledger with the sample votes, replacing existing ones."""
        for vote in self.seed_votes:
            self._put_vote(ctx, vote)
            logger.info(f"Vote from {vote.voter_id} initialized")

    @transaction("RegisterVote")
    def register_vote(
        self,
        ctx: TransactionContext,
        voter_id: str,
        candidate_id: str,
        station: str,
    ) -> None:
        if self.vote_exists(ctx, voter_id):
            raise AlreadyExistsError(voter_id)
        self._put_vote(
            ctx, Vote(voter_id=voter_id, candidate_id=candidate_id, station=station)
        )

    @transaction("ReadVote", submit=False)
    def read_vote(self, ctx: TransactionContext, voter_id: str) -> bytes:
        """Return the stored bytes for voter_id without decoding them."""
        raw = self._get_raw(ctx, voter_id)
        if not raw:
            raise NotFoundError(voter_id)
        return raw

    @transaction("UpdateVote")
    def update_vote(
        self,
        ctx: TransactionContext,
        voter_id: str,
        candidate_id: str,
        station: str,
    ) -> None:
        if not self.vote_exists(ctx, voter_id):
            raise NotFoundError(voter_id)
        # Replaces the whole stored value; nothing is merged from the old vote.
        self._put_vote(
            ctx, Vote(voter_id=voter_id, candidate_id=candidate_id, station=station)
        )

    @transaction("DeleteVote")
    def delete_vote(self, ctx: TransactionContext, voter_id: str) -> None:
        if not self.vote_exists(ctx, voter_id):
            raise NotFoundError(voter_id)
        ctx.stub.delete_state(voter_id)

    @transaction("VoteExists", submit=False)
    def vote_exists(self, ctx: TransactionContext, voter_id: str) -> bool:
        return bool(self._get_raw(ctx, voter_id))

    def get_all_votes(self, ctx: TransactionContext) -> Iterator[ScanEntry]:
        """Yield every stored entry in key order.

        Values that do not decode as a vote are yielded as ``Raw`` text and
        the scan carries on. The range cursor is closed however the caller
        stops consuming.
        """
        with ctx.stub.get_state_by_range(*FULL_RANGE) as iterator:
            for entry in iterator:
                scanned: ScanEntry
                try:
                    vote, stored = decode_record(entry.value, key=entry.key)
                    scanned = Decoded(key=entry.key, vote=vote, stored=stored)
                except DecodeError as e:
                    logger.warning(f"Keeping raw value in scan: {e}")
                    scanned = Raw(key=entry.key, value=raw_text(entry.value))
                yield scanned

    @transaction("GetAllVotes", submit=False)
    def get_all_votes_json(self, ctx: TransactionContext) -> str:
        return json.dumps(
            [entry.to_json_value() for entry in self.get_all_votes(ctx)],
            sort_keys=True,
            ensure_ascii=False,
        )

    @transaction("DeleteAllVotes")
    def delete_all_votes(self, ctx: TransactionContext) -> int:
        """Delete every key in the World State and return how many were removed.

        Safe to repeat: an empty World State is left as is.
        """
        deleted = 0
        with ctx.stub.get_state_by_range(*FULL_RANGE) as iterator:
            for entry in iterator:
                ctx.stub.delete_state(entry.key)
                deleted += 1
        logger.info(f"All votes have been deleted ({deleted} entries)")
        return deleted

    @transaction("GetVoteStatistics", submit=False)
    def get_vote_statistics(self, ctx: TransactionContext) -> dict[str, int]:
        """Count stored votes per candidate, skipping undecodable entries."""
        counts: dict[str, int] = {}
        with ctx.stub.get_state_by_range(*FULL_RANGE) as iterator:
            for entry in iterator:
                try:
                    vote = decode_vote(entry.value, key=entry.key)
                except DecodeError as e:
                    logger.warning(f"Skipping entry in tally: {e}")
                    continue
                counts[vote.candidate_id] = counts.get(vote.candidate_id, 0) + 1
        return counts
