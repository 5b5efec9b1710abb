"""
Query descriptor builders.

Every function here returns [QueryFilter][flowgazer.models.query.QueryFilter]
objects for the transport collaborator. Builders whose preconditions fail
(no identity, nobody followed) return ``None`` or an empty list and log
why, so the caller can abort the request without handling an exception.
"""

from __future__ import annotations

from collections.abc import Iterable

from flowgazer.core.logger import Logger
from flowgazer.models import EventKind, QueryFilter, Tab

from .configs import PaginationConfig, TabsConfig
from .session import Session
from .store import EventStore
from .tabs import TAB_POLICIES


_logger = Logger("flowgazer.queries")


def _followed_authors(store: EventStore, me: str | None) -> tuple[str, ...]:
    return tuple(sorted(store.following - {me}))


def own_note_ids(store: EventStore, me: str, limit: int) -> tuple[str, ...]:
    """Ids of the newest *limit* notes authored by *me*."""
    notes = [
        e
        for e in store.get_events(store.events_by_author(me))
        if e.kind == EventKind.TEXT_NOTE
    ]
    notes.sort(key=lambda e: (-e.created_at, e.id))
    return tuple(e.id for e in notes[:limit])


def build_load_more_filter(
    tab: Tab,
    until: int,
    *,
    session: Session,
    store: EventStore,
    tabs: TabsConfig,
    pagination: PaginationConfig,
    authors: Iterable[str] | None = None,
) -> QueryFilter | None:
    """Filter for the page of *tab* strictly older than *until*.

    Args:
        tab: Tab to paginate.
        until: Current oldest boundary of the tab; the filter asks for
            ``until - 1``.
        authors: Optional allowlist, honoured for the global tab.

    Returns:
        The filter, or ``None`` when the following list is empty (following)
        or there is no local identity (myposts, likes).
    """
    me = session.local_identity_key()
    base = {
        "kinds": TAB_POLICIES[tab].kinds(tabs),
        "until": max(until - 1, 0),
        "limit": pagination.load_more_limit,
    }

    if tab == Tab.GLOBAL:
        allowlist = tuple(sorted(set(authors))) if authors else None
        return QueryFilter(authors=allowlist, **base)

    if tab == Tab.FOLLOWING:
        followed = _followed_authors(store, me)
        if not followed:
            _logger.info("load_more_unavailable", tab=tab, reason="empty_following")
            return None
        return QueryFilter(authors=followed, **base)

    if me is None:
        _logger.info("load_more_unavailable", tab=tab, reason="unauthenticated")
        return None

    if tab == Tab.MYPOSTS:
        return QueryFilter(authors=(me,), **base)
    return QueryFilter(p_tags=(me,), **base)


def build_main_timeline_filters(
    *,
    session: Session,
    store: EventStore,
    tabs: TabsConfig,
    pagination: PaginationConfig,
    authors: Iterable[str] | None = None,
    since: int | None = None,
) -> list[QueryFilter]:
    """Filters for the long-lived live subscription.

    Covers the global timeline, followed authors, notifications tagging the
    local identity and reactions to its newest notes. Identity-dependent
    filters are omitted while logged out.
    """
    me = session.local_identity_key()
    public_kinds = TAB_POLICIES[Tab.GLOBAL].kinds(tabs)
    allowlist = tuple(sorted(set(authors))) if authors else None

    filters = [
        QueryFilter(
            kinds=public_kinds,
            authors=allowlist,
            since=since,
            limit=pagination.main_timeline_limit,
        )
    ]

    followed = _followed_authors(store, me)
    if followed:
        filters.append(
            QueryFilter(
                kinds=public_kinds,
                authors=followed,
                since=since,
                limit=pagination.main_timeline_limit,
            )
        )

    if me is None:
        return filters

    filters.append(
        QueryFilter(
            kinds=TAB_POLICIES[Tab.LIKES].kinds(tabs),
            p_tags=(me,),
            since=since,
            limit=pagination.notification_limit,
        )
    )

    targets = own_note_ids(store, me, pagination.reaction_target_limit)
    if targets:
        filters.append(
            QueryFilter(
                kinds=(EventKind.REPOST, EventKind.REACTION),
                e_tags=targets,
                since=since,
            )
        )
    return filters


def build_tab_history_filters(
    tab: Tab,
    *,
    session: Session,
    tabs: TabsConfig,
    pagination: PaginationConfig,
) -> list[QueryFilter]:
    """One-shot backlog filters fetched when a personal tab is opened.

    Public tabs are served by the main timeline and return no filters.
    The likes backlog issues one filter per admitted kind so a flood of
    reactions cannot starve mentions and reposts of the limit.
    """
    me = session.local_identity_key()
    if tab in (Tab.GLOBAL, Tab.FOLLOWING):
        return []
    if me is None:
        _logger.info("history_unavailable", tab=tab, reason="unauthenticated")
        return []

    kinds = TAB_POLICIES[tab].kinds(tabs)
    if tab == Tab.MYPOSTS:
        return [QueryFilter(kinds=kinds, authors=(me,), limit=pagination.history_limit)]
    return [
        QueryFilter(kinds=(kind,), p_tags=(me,), limit=pagination.notification_limit)
        for kind in kinds
    ]


def build_following_list_filter(pubkey: str) -> QueryFilter:
    """Latest kind 3 contact list of *pubkey*."""
    return QueryFilter(kinds=(EventKind.CONTACTS,), authors=(pubkey,), limit=1)


def build_profile_filter(pubkeys: Iterable[str]) -> QueryFilter | None:
    """Kind 0 metadata for *pubkeys*, or ``None`` if there are none."""
    authors = tuple(sorted(set(pubkeys)))
    if not authors:
        return None
    return QueryFilter(kinds=(EventKind.SET_METADATA,), authors=authors)
