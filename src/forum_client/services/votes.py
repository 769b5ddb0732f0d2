"""Anonymous per-voter vote accounting.

Pure logic shared by the list and detail views: tallying fetched vote rows,
resolving the current voter's stored vote, and the toggle/switch transition
rules applied when a voter clicks an arrow. Nothing here performs I/O; the
:class:`VoteBoard` only awaits the mutation callable handed to it.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Literal, TypeAlias

logger = logging.getLogger(__name__)

PostId: TypeAlias = int
Direction: TypeAlias = Literal[-1, 1]
VoteAction: TypeAlias = Literal["remove", "upsert"]

UPVOTE: Direction = 1
DOWNVOTE: Direction = -1
VALID_DIRECTIONS: frozenset[int] = frozenset({UPVOTE, DOWNVOTE})


def _stored_direction(value: object) -> int:
    # Anything but an exact int +1/-1 becomes 0, which tallying skips.
    if type(value) is int and value in VALID_DIRECTIONS:
        return value
    return 0


@dataclass(frozen=True)
class VoteRecord:
    """One stored vote row."""

    post_id: PostId
    voter: str
    direction: int

    @classmethod
    def from_row(cls, row: Mapping[str, object]) -> VoteRecord:
        """Build a record from a remote ``votes`` row."""
        return cls(
            post_id=row["post_id"],  # type: ignore[arg-type]
            voter=str(row.get("user_ip", "")),
            direction=_stored_direction(row.get("vote_type")),
        )


@dataclass(frozen=True)
class Tally:
    """Derived up/down/net counts for a post."""

    upvotes: int = 0
    downvotes: int = 0

    @property
    def total(self) -> int:
        return self.upvotes - self.downvotes

    def as_dict(self) -> dict[str, int]:
        return {"upvotes": self.upvotes, "downvotes": self.downvotes, "total": self.total}


@dataclass(frozen=True)
class VoteTransition:
    """Outcome of a vote click: what to do remotely and the resulting vote."""

    action: VoteAction
    resulting_vote: Direction | None


def compute_tallies(
    votes: Iterable[VoteRecord],
    post_ids: Iterable[PostId],
) -> dict[PostId, Tally]:
    """Count votes per post.

    Every requested post gets an entry, even with no votes. Records for posts
    outside ``post_ids`` are ignored, and records with a direction other than
    +1/-1 are logged and skipped.
    """
    counts: dict[PostId, list[int]] = {post_id: [0, 0] for post_id in post_ids}

    for vote in votes:
        bucket = counts.get(vote.post_id)
        if bucket is None:
            continue
        if vote.direction == UPVOTE:
            bucket[0] += 1
        elif vote.direction == DOWNVOTE:
            bucket[1] += 1
        else:
            logger.warning(
                "Ignoring vote with invalid direction %r on post %s",
                vote.direction,
                vote.post_id,
            )

    return {post_id: Tally(upvotes=up, downvotes=down) for post_id, (up, down) in counts.items()}


def current_user_votes(
    votes: Iterable[VoteRecord],
    post_ids: Iterable[PostId],
    voter: str,
) -> dict[PostId, Direction | None]:
    """Return the voter's stored direction for each requested post.

    At most one record per (post, voter) should exist. If the store holds
    more, the first one encountered wins and the anomaly is logged.
    """
    result: dict[PostId, Direction | None] = {post_id: None for post_id in post_ids}
    seen: set[PostId] = set()

    for vote in votes:
        if vote.voter != voter or vote.post_id not in result:
            continue
        if vote.post_id in seen:
            logger.warning(
                "Multiple votes stored for voter %s on post %s; keeping the first",
                voter,
                vote.post_id,
            )
            continue
        seen.add(vote.post_id)
        if vote.direction in VALID_DIRECTIONS:
            result[vote.post_id] = vote.direction  # type: ignore[assignment]

    return result


def current_user_vote(
    votes: Iterable[VoteRecord],
    post_id: PostId,
    voter: str,
) -> Direction | None:
    """Return the voter's stored direction on a single post."""
    return current_user_votes(votes, [post_id], voter)[post_id]


def apply_vote(current: Direction | None, requested: Direction) -> VoteTransition:
    """Resolve a vote click against the voter's current vote.

    Clicking the direction already stored removes the vote. Anything else
    stores the requested direction, replacing a previous one.
    """
    if requested not in VALID_DIRECTIONS:
        raise ValueError(f"Invalid vote direction: {requested!r}")

    if current == requested:
        return VoteTransition(action="remove", resulting_vote=None)
    return VoteTransition(action="upsert", resulting_vote=requested)


def update_tally(tally: Tally, old_vote: int | None, new_vote: int | None) -> Tally:
    """Apply a vote change to a tally without recounting.

    ``None`` and ``0`` both mean "no vote".
    """
    old = old_vote or 0
    new = new_vote or 0
    return Tally(
        upvotes=tally.upvotes + (new == UPVOTE) - (old == UPVOTE),
        downvotes=tally.downvotes + (new == DOWNVOTE) - (old == DOWNVOTE),
    )


VoteMutation: TypeAlias = Callable[[VoteTransition], Awaitable[object]]


@dataclass
class VoteBoard:
    """Per-view tallies and the current voter's votes.

    ``cast`` updates the local state before the remote mutation completes and
    restores the previous state if the mutation fails.
    """

    tallies: dict[PostId, Tally] = field(default_factory=dict)
    user_votes: dict[PostId, Direction | None] = field(default_factory=dict)

    @classmethod
    def from_votes(
        cls,
        votes: Iterable[VoteRecord],
        post_ids: Iterable[PostId],
        voter: str,
    ) -> VoteBoard:
        records = list(votes)
        ids = list(post_ids)
        return cls(
            tallies=compute_tallies(records, ids),
            user_votes=current_user_votes(records, ids, voter),
        )

    def tally(self, post_id: PostId) -> Tally:
        return self.tallies.get(post_id, Tally())

    def user_vote(self, post_id: PostId) -> Direction | None:
        return self.user_votes.get(post_id)

    async def cast(
        self,
        post_id: PostId,
        requested: Direction,
        mutate: VoteMutation,
    ) -> VoteTransition:
        """Apply a vote click optimistically and run the remote mutation."""
        previous_vote = self.user_vote(post_id)
        previous_tally = self.tally(post_id)
        transition = apply_vote(previous_vote, requested)

        self.user_votes[post_id] = transition.resulting_vote
        self.tallies[post_id] = update_tally(
            previous_tally, previous_vote, transition.resulting_vote
        )

        try:
            await mutate(transition)
        except Exception:
            self.user_votes[post_id] = previous_vote
            self.tallies[post_id] = previous_tally
            raise

        return transition
