from .service import PushDispatcher, SubscriptionStore, MemorySubscriptionStore, SupabaseSubscriptionStore

__all__ = ["PushDispatcher", "SubscriptionStore", "MemorySubscriptionStore", "SupabaseSubscriptionStore"]
