# backend/sparkvibe/core/container.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sparkvibe.adapters.llm_client import LLMClient, build_llm_client
from sparkvibe.adapters.supabase_client import SupabaseHandle
from sparkvibe.adapters.webpush_client import PushSender, build_push_sender
from sparkvibe.core.config import Settings
from sparkvibe.domain.capsules import ContentSelector
from sparkvibe.domain.leaderboard import LeaderboardService
from sparkvibe.domain.moods import MoodAnalyzer
from sparkvibe.domain.progress import (
    MemoryProgressStore,
    ProgressLedger,
    ProgressStore,
    SupabaseProgressStore,
)
from sparkvibe.domain.push import (
    MemorySubscriptionStore,
    PushDispatcher,
    SubscriptionStore,
    SupabaseSubscriptionStore,
)

log = logging.getLogger("sparkvibe.core")


@dataclass
class Services:
    """Everything a request handler may touch. Built once per app."""
    settings: Settings
    store: ProgressStore
    llm: Optional[LLMClient]
    selector: ContentSelector
    analyzer: MoodAnalyzer
    ledger: ProgressLedger
    leaderboard: LeaderboardService
    push: PushDispatcher


def build_services(
    settings: Settings,
    *,
    store: Optional[ProgressStore] = None,
    subscriptions: Optional[SubscriptionStore] = None,
    llm: Optional[LLMClient] = None,
    push_sender: Optional[PushSender] = None,
) -> Services:
    """
    Explicit handles override what the settings would build (tests pass
    in-memory stores and fakes here).
    """
    tuning = settings.tuning()

    # explicit None checks: an empty MemoryProgressStore is falsy
    if settings.STORE_BACKEND == "memory":
        if store is None:
            store = MemoryProgressStore()
        if subscriptions is None:
            subscriptions = MemorySubscriptionStore()
    elif store is None or subscriptions is None:
        handle = SupabaseHandle(settings)
        if store is None:
            store = SupabaseProgressStore(handle, settings.SUPABASE_PROGRESS_TABLE)
        if subscriptions is None:
            subscriptions = SupabaseSubscriptionStore(handle, settings.SUPABASE_PUSH_TABLE)

    llm = llm if llm is not None else build_llm_client(settings)
    push_sender = push_sender if push_sender is not None else build_push_sender(settings)

    log.info(
        "services: store=%s llm=%s push=%s",
        type(store).__name__, "on" if llm else "off", "on" if push_sender else "off",
    )
    return Services(
        settings=settings,
        store=store,
        llm=llm,
        selector=ContentSelector(llm),
        analyzer=MoodAnalyzer(llm),
        ledger=ProgressLedger(store, tuning),
        leaderboard=LeaderboardService(store, tuning),
        push=PushDispatcher(push_sender, subscriptions),
    )
