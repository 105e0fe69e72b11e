"""Subscription registry."""

from eventbus.subscriptions.registry import Registration, SubscriptionRegistry

__all__ = ["Registration", "SubscriptionRegistry"]
