"""
Like/dislike counters for a single blog.

A blog is either in the liked state (``is_good``) or the disliked state.
Counters record how many times each side was entered; switching sides moves
one unit from the other counter, floored at zero. All functions are pure.
"""
from enum import Enum
from typing import NamedTuple


class ReactionAction(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"
    TOGGLE = "toggle"


class ReactionState(NamedTuple):
    is_good: bool
    likes_count: int
    dislikes_count: int


def _floored(state: ReactionState) -> ReactionState:
    return ReactionState(
        bool(state.is_good),
        max(int(state.likes_count or 0), 0),
        max(int(state.dislikes_count or 0), 0),
    )


def _enter_liked(state: ReactionState) -> ReactionState:
    return ReactionState(True, state.likes_count + 1, max(state.dislikes_count - 1, 0))


def _enter_disliked(state: ReactionState) -> ReactionState:
    return ReactionState(False, max(state.likes_count - 1, 0), state.dislikes_count + 1)


def apply_like(state: ReactionState) -> ReactionState:
    """Move to the liked state; no-op when already liked."""
    state = _floored(state)
    if state.is_good:
        return state
    return _enter_liked(state)


def apply_dislike(state: ReactionState) -> ReactionState:
    """Move to the disliked state; no-op when already disliked."""
    state = _floored(state)
    if not state.is_good:
        return state
    return _enter_disliked(state)


def apply_toggle(state: ReactionState) -> ReactionState:
    """Flip the state unconditionally."""
    state = _floored(state)
    if state.is_good:
        return _enter_disliked(state)
    return _enter_liked(state)


_TRANSITIONS = {
    ReactionAction.LIKE: apply_like,
    ReactionAction.DISLIKE: apply_dislike,
    ReactionAction.TOGGLE: apply_toggle,
}


def apply_reaction(state: ReactionState, action) -> ReactionState:
    try:
        transition = _TRANSITIONS[ReactionAction(action)]
    except ValueError:
        raise ValueError(f"Unknown reaction action: {action!r}") from None
    return transition(state)
