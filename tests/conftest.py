"""Shared fixtures: an in-memory SQLite schema of users, posts, comments and roles."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Optional

import pytest
from sqlalchemy import Column, ForeignKey, Integer, String, Table, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, relationship

from resource_query import QueryFilterTranslator, ResourceConfig, TimestampModelMixin


class Base(DeclarativeBase):
    pass


user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", ForeignKey("users.id"), primary_key=True),
    Column("role_id", ForeignKey("roles.id"), primary_key=True),
)


class UserRecord(TimestampModelMixin, Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(String, default="active")
    age: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    posts: Mapped[list[PostRecord]] = relationship(back_populates="user")
    roles: Mapped[list[RoleRecord]] = relationship(secondary=user_roles)


class PostRecord(Base):
    __tablename__ = "posts"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String)
    user_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"))
    user: Mapped[Optional[UserRecord]] = relationship(back_populates="posts")
    comments: Mapped[list[CommentRecord]] = relationship(back_populates="post")


class CommentRecord(Base):
    __tablename__ = "comments"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    body: Mapped[str] = mapped_column(String)
    post_id: Mapped[Optional[int]] = mapped_column(ForeignKey("posts.id"))
    post: Mapped[Optional[PostRecord]] = relationship(back_populates="comments")


class RoleRecord(Base):
    __tablename__ = "roles"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    label: Mapped[str] = mapped_column(String)


class CategoryRecord(Base):
    __tablename__ = "categories"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String)
    parent_id: Mapped[Optional[int]] = mapped_column(ForeignKey("categories.id"))
    parent: Mapped[Optional[CategoryRecord]] = relationship(
        back_populates="children", remote_side="CategoryRecord.id"
    )
    children: Mapped[list[CategoryRecord]] = relationship(back_populates="parent")


@pytest.fixture
def engine():
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def users() -> ResourceConfig:
    return ResourceConfig.from_model(UserRecord)


@pytest.fixture
def translator(users, session) -> QueryFilterTranslator:
    return QueryFilterTranslator(users, session)


@pytest.fixture
def seeded(session):
    """Three users; alice has two posts (one with a comment) and a role."""
    admin = RoleRecord(id=1, label="admin")
    alice = UserRecord(id=1, name="alice", email="a@example.com", status="active", age=30)
    bob = UserRecord(id=2, name="bob", email=None, status="inactive", age=17)
    carol = UserRecord(id=3, name="carol", email="c@example.com", status="active", age=45)
    alice.roles.append(admin)
    first = PostRecord(id=1, title="hello", user=alice)
    PostRecord(id=2, title="again", user=alice)
    CommentRecord(id=1, body="nice", post=first)
    session.add_all([alice, bob, carol])
    session.commit()
    return {"alice": alice, "bob": bob, "carol": carol}


@pytest.fixture
def models() -> SimpleNamespace:
    return SimpleNamespace(
        User=UserRecord,
        Post=PostRecord,
        Comment=CommentRecord,
        Role=RoleRecord,
        Category=CategoryRecord,
    )
