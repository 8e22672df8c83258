"""点赞、关注 CRUD 操作"""
import uuid

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, delete, func, select

from orchard.api.errors import AppError
from orchard.models import Follower, Like, Profile


# ------------------------------------------------------------
# 点赞
# ------------------------------------------------------------


def get_like(*, session: Session, user_id: uuid.UUID, post_id: uuid.UUID) -> Like | None:
    statement = select(Like).where(Like.user_id == user_id, Like.post_id == post_id)
    return session.exec(statement).first()


def toggle_like(*, session: Session, user_id: uuid.UUID, post_id: uuid.UUID) -> bool:
    """
    切换点赞状态

    Returns:
        切换后是否为已点赞
    """
    existing = get_like(session=session, user_id=user_id, post_id=post_id)
    if existing:
        session.delete(existing)
        session.commit()
        return False

    session.add(Like(user_id=user_id, post_id=post_id))
    try:
        session.commit()
    except IntegrityError:
        # 并发的另一次点赞已经写入
        session.rollback()
    return True


def like_count(*, session: Session, post_id: uuid.UUID) -> int:
    statement = select(func.count()).select_from(Like).where(Like.post_id == post_id)
    return session.exec(statement).one()


def has_liked(*, session: Session, user_id: uuid.UUID | None, post_id: uuid.UUID) -> bool:
    if user_id is None:
        return False
    return get_like(session=session, user_id=user_id, post_id=post_id) is not None


def like_counts(*, session: Session, post_ids: list[uuid.UUID]) -> dict[uuid.UUID, int]:
    """批量统计点赞数，没有点赞的作品不出现在结果中"""
    if not post_ids:
        return {}
    statement = (
        select(Like.post_id, func.count())
        .where(Like.post_id.in_(post_ids))  # type: ignore[union-attr]
        .group_by(Like.post_id)
    )
    return {post_id: count for post_id, count in session.exec(statement).all()}


def liked_post_ids(
    *, session: Session, user_id: uuid.UUID | None, post_ids: list[uuid.UUID]
) -> set[uuid.UUID]:
    if user_id is None or not post_ids:
        return set()
    statement = select(Like.post_id).where(
        Like.user_id == user_id,
        Like.post_id.in_(post_ids),  # type: ignore[union-attr]
    )
    return set(session.exec(statement).all())


# ------------------------------------------------------------
# 关注
# ------------------------------------------------------------


def follow(*, session: Session, user_id: uuid.UUID, followed_id: uuid.UUID) -> Follower:
    """关注用户，重复关注返回 409"""
    if user_id == followed_id:
        raise AppError(code=400301, message="You cannot follow yourself", status_code=400)
    if session.get(Profile, followed_id) is None:
        raise AppError(code=404301, message="User not found", status_code=404)

    edge = Follower(user_id=user_id, followed_id=followed_id)
    session.add(edge)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise AppError(code=409301, message="Already following", status_code=409)
    session.refresh(edge)
    return edge


def unfollow(*, session: Session, user_id: uuid.UUID, followed_id: uuid.UUID) -> None:
    """取消关注，未关注时同样视为成功"""
    session.exec(
        delete(Follower).where(
            Follower.user_id == user_id,  # type: ignore[arg-type]
            Follower.followed_id == followed_id,  # type: ignore[arg-type]
        )
    )
    session.commit()


def is_following(*, session: Session, user_id: uuid.UUID | None, followed_id: uuid.UUID) -> bool:
    if user_id is None:
        return False
    statement = select(Follower.id).where(
        Follower.user_id == user_id, Follower.followed_id == followed_id
    )
    return session.exec(statement).first() is not None


def follower_count(*, session: Session, user_id: uuid.UUID) -> int:
    """粉丝数：有多少人关注了 user_id"""
    statement = select(func.count()).select_from(Follower).where(Follower.followed_id == user_id)
    return session.exec(statement).one()


def following_count(*, session: Session, user_id: uuid.UUID) -> int:
    """关注数：user_id 关注了多少人"""
    statement = select(func.count()).select_from(Follower).where(Follower.user_id == user_id)
    return session.exec(statement).one()


def list_followers(*, session: Session, user_id: uuid.UUID) -> list[tuple[Follower, Profile]]:
    statement = (
        select(Follower, Profile)
        .join(Profile, Profile.id == Follower.user_id)  # type: ignore[arg-type]
        .where(Follower.followed_id == user_id)
        .order_by(Follower.created_at.desc())  # type: ignore[attr-defined]
    )
    return list(session.exec(statement).all())


def list_following(*, session: Session, user_id: uuid.UUID) -> list[tuple[Follower, Profile]]:
    statement = (
        select(Follower, Profile)
        .join(Profile, Profile.id == Follower.followed_id)  # type: ignore[arg-type]
        .where(Follower.user_id == user_id)
        .order_by(Follower.created_at.desc())  # type: ignore[attr-defined]
    )
    return list(session.exec(statement).all())
