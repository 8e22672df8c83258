"""用户资料 CRUD 操作"""
import uuid
from decimal import Decimal
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from orchard.api.errors import AppError
from orchard.core.security import get_password_hash, verify_password
from orchard.enums import AccountType
from orchard.models import Profile, utc_now


def get_by_email(*, session: Session, email: str) -> Profile | None:
    """根据邮箱查询用户（不区分大小写）"""
    statement = select(Profile).where(Profile.email == email.strip().lower())
    return session.exec(statement).first()


def get_by_username(*, session: Session, username: str) -> Profile | None:
    """根据用户名查询用户"""
    statement = select(Profile).where(Profile.username == username)
    return session.exec(statement).first()


def get_creator(
    *, session: Session, creator_id: uuid.UUID | None = None, username: str | None = None
) -> Profile | None:
    """查询创作者账号，按 ID 或用户名，非创作者返回 None"""
    statement = select(Profile).where(Profile.account_type == AccountType.creator)
    if creator_id is not None:
        statement = statement.where(Profile.id == creator_id)
    if username is not None:
        statement = statement.where(Profile.username == username)
    return session.exec(statement).first()


def create(*, session: Session, email: str, password: str, username: str | None = None) -> Profile:
    """注册新用户，账号类型留空等待引导"""
    email = email.strip().lower()
    if get_by_email(session=session, email=email):
        raise AppError(code=409001, message="Email already registered", status_code=409)
    if username and get_by_username(session=session, username=username):
        raise AppError(code=409002, message="Username already taken", status_code=409)

    profile = Profile(
        email=email,
        hashed_password=get_password_hash(password),
        username=username,
    )
    session.add(profile)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise AppError(code=409001, message="Email already registered", status_code=409)
    session.refresh(profile)
    return profile


def authenticate(*, session: Session, email: str, password: str) -> Profile | None:
    """校验邮箱和密码，失败返回 None"""
    profile = get_by_email(session=session, email=email)
    if not profile:
        return None
    if not verify_password(password, profile.hashed_password):
        return None
    return profile


def set_account_type(*, session: Session, profile: Profile, account_type: AccountType) -> Profile:
    """首次引导设置账号类型，只能设置一次"""
    if profile.account_type:
        raise AppError(code=409003, message="Account type already set", status_code=409)
    profile.account_type = account_type
    profile.updated_at = utc_now()
    session.add(profile)
    session.commit()
    session.refresh(profile)
    return profile


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def update(*, session: Session, profile: Profile, changes: dict[str, Any]) -> Profile:
    """
    设置页保存资料

    changes 只包含请求中出现的字段，未出现的字段保持不变。
    - 空字符串统一存为 None
    - subscription_price 只对创作者保留，粉丝账号清空
    """
    if "username" in changes:
        username = _clean(changes["username"])
        if username and username != profile.username:
            other = get_by_username(session=session, username=username)
            if other and other.id != profile.id:
                raise AppError(code=409002, message="Username already taken", status_code=409)
        profile.username = username
    if "full_name" in changes:
        profile.full_name = _clean(changes["full_name"])
    if "bio" in changes:
        profile.bio = _clean(changes["bio"])
    if changes.get("account_type") is not None:
        profile.account_type = changes["account_type"]

    if not profile.is_creator:
        profile.subscription_price = None
    elif "subscription_price" in changes:
        price: Decimal | None = changes["subscription_price"]
        profile.subscription_price = price
    profile.updated_at = utc_now()
    session.add(profile)
    session.commit()
    session.refresh(profile)
    return profile


def set_avatar(*, session: Session, profile: Profile, path: str) -> Profile:
    """保存头像路径"""
    profile.avatar_url = path
    profile.updated_at = utc_now()
    session.add(profile)
    session.commit()
    session.refresh(profile)
    return profile


def set_stripe_customer(*, session: Session, profile: Profile, customer_id: str) -> None:
    """记住 Stripe 客户 ID，下次结账直接复用"""
    if profile.stripe_customer_id == customer_id:
        return
    profile.stripe_customer_id = customer_id
    session.add(profile)
    session.commit()
