from . import claims, history, listings, restaurants, users  # noqa: F401

__all__ = ["claims", "history", "listings", "restaurants", "users"]
