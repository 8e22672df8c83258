"""CRUD 操作模块"""
from .payments import (
    activate_subscription,
    cancel_subscription,
    create_redemption,
    get_subscription,
    mark_subscription_deleted,
    record_apple_gift,
    record_transaction,
)
from .profile import authenticate
from .profile import create as create_profile
from .profile import get_by_email as get_profile_by_email
from .profile import get_by_username as get_profile_by_username
from .profile import get_creator
from .profile import set_account_type, set_avatar, set_stripe_customer
from .profile import update as update_profile
from .social import (
    follow,
    follower_count,
    following_count,
    has_liked,
    is_following,
    like_count,
    like_counts,
    liked_post_ids,
    list_followers,
    list_following,
    toggle_like,
    unfollow,
)

__all__ = [
    "activate_subscription",
    "cancel_subscription",
    "create_redemption",
    "get_subscription",
    "mark_subscription_deleted",
    "record_apple_gift",
    "record_transaction",
    "authenticate",
    "create_profile",
    "get_profile_by_email",
    "get_profile_by_username",
    "get_creator",
    "set_account_type",
    "set_avatar",
    "set_stripe_customer",
    "update_profile",
    "follow",
    "follower_count",
    "following_count",
    "has_liked",
    "is_following",
    "like_count",
    "like_counts",
    "liked_post_ids",
    "list_followers",
    "list_following",
    "toggle_like",
    "unfollow",
]
