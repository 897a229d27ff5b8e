"""SQLite storage adapter.

Implements the core RuleStoragePort and DirectoryPort using a simple SQLite
database.
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import replace
from typing import Any, Optional

from core.models import Category, Channel, Group, Rule, Tag


def _rule_from_row(row: sqlite3.Row) -> Rule:
    tags = json.loads(row["tags"]) if row["tags"] else None
    return Rule(
        id=int(row["id"]),
        channel_id=int(row["channel_id"]),
        type=row["type"],
        filter=row["filter"],
        category_id=row["category_id"],
        group_id=row["group_id"],
        tags=tuple(tags) if tags else None,
    )


def _encode_tags(rule: Rule) -> Optional[str]:
    # An empty array is never stored; no tags is always NULL.
    if not rule.tags:
        return None
    return json.dumps(list(rule.tags))


class SQLiteStorage:
    """Thin SQLite wrapper that satisfies the storage and directory contracts."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - rules: routing rules, one row per rule
        - channels: chat conversations bound to the forum
        - categories, tags, forum_groups: directory records mirrored from the forum
        """

        with self._connect() as conn:
            # rules holds exactly the rule fields.
            # Fields:
            # - id: auto-increment primary key, also the canonical tie-break
            # - channel_id: owning channel
            # - type: normal, group_message or group_mention
            # - filter: watch, follow or mute
            # - category_id: NULL means all categories
            # - group_id: only set for group rule types
            # - tags: JSON array of tag names, NULL when there are none
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS rules (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    channel_id INTEGER NOT NULL,
                    type TEXT NOT NULL,
                    filter TEXT NOT NULL,
                    category_id INTEGER,
                    group_id INTEGER,
                    tags TEXT
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS rules_channel_id ON rules (channel_id)")
            # chat_key uses the same "@username" / "chat_id:<id>" form as the
            # Telegram adapter so incoming commands can find their channel.
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS channels (
                    id INTEGER PRIMARY KEY,
                    provider TEXT NOT NULL,
                    chat_key TEXT UNIQUE
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS categories (
                    id INTEGER PRIMARY KEY,
                    slug TEXT NOT NULL UNIQUE
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS tags (
                    id INTEGER PRIMARY KEY,
                    name TEXT NOT NULL UNIQUE
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS forum_groups (
                    id INTEGER PRIMARY KEY,
                    name TEXT NOT NULL
                )
                """
            )

    # Rules

    def find_rules_by_channel(self, channel_id: int) -> list[Rule]:
        """Return every rule owned by a channel."""

        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM rules WHERE channel_id = ? ORDER BY id",
                (channel_id,),
            ).fetchall()
        return [_rule_from_row(row) for row in rows]

    def create(self, rule: Rule) -> Rule:
        """Insert a rule and return it with its assigned id."""

        with self._connect() as conn:
            cur = conn.execute(
                """
                INSERT INTO rules (channel_id, type, filter, category_id, group_id, tags)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    rule.channel_id,
                    rule.type,
                    rule.filter,
                    rule.category_id,
                    rule.group_id,
                    _encode_tags(rule),
                ),
            )
            rule_id = cur.lastrowid
        return replace(rule, id=rule_id)

    def update(self, rule: Rule) -> Rule:
        """Overwrite every field of an existing rule."""

        if rule.id is None:
            raise ValueError("Cannot update a rule without an id")
        with self._connect() as conn:
            conn.execute(
                """
                UPDATE rules
                SET channel_id = ?, type = ?, filter = ?, category_id = ?, group_id = ?, tags = ?
                WHERE id = ?
                """,
                (
                    rule.channel_id,
                    rule.type,
                    rule.filter,
                    rule.category_id,
                    rule.group_id,
                    _encode_tags(rule),
                    rule.id,
                ),
            )
        return rule

    def destroy(self, rule: Rule) -> bool:
        """Delete a rule; False when it was already gone."""

        with self._connect() as conn:
            cur = conn.execute("DELETE FROM rules WHERE id = ?", (rule.id,))
            return cur.rowcount > 0

    # Directory

    def category_by_slug(self, slug: str) -> Optional[Category]:
        with self._connect() as conn:
            row = conn.execute("SELECT id, slug FROM categories WHERE slug = ?", (slug,)).fetchone()
        return Category(id=int(row["id"]), slug=row["slug"]) if row else None

    def category_by_id(self, category_id: int) -> Optional[Category]:
        with self._connect() as conn:
            row = conn.execute("SELECT id, slug FROM categories WHERE id = ?", (category_id,)).fetchone()
        return Category(id=int(row["id"]), slug=row["slug"]) if row else None

    def all_category_slugs(self) -> list[str]:
        with self._connect() as conn:
            rows = conn.execute("SELECT slug FROM categories ORDER BY id").fetchall()
        return [row["slug"] for row in rows]

    def tag_by_name(self, name: str) -> Optional[Tag]:
        with self._connect() as conn:
            row = conn.execute("SELECT id, name FROM tags WHERE name = ?", (name,)).fetchone()
        return Tag(id=int(row["id"]), name=row["name"]) if row else None

    def group_by_id(self, group_id: int) -> Optional[Group]:
        with self._connect() as conn:
            row = conn.execute("SELECT id, name FROM forum_groups WHERE id = ?", (group_id,)).fetchone()
        return Group(id=int(row["id"]), name=row["name"]) if row else None

    def channel_by_id(self, channel_id: int) -> Optional[Channel]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT id, provider, chat_key FROM channels WHERE id = ?",
                (channel_id,),
            ).fetchone()
        return Channel(id=int(row["id"]), provider=row["provider"], chat_key=row["chat_key"]) if row else None

    def channel_by_chat_key(self, chat_key: str) -> Optional[Channel]:
        """Return the channel bound to a chat, if any."""

        with self._connect() as conn:
            row = conn.execute(
                "SELECT id, provider, chat_key FROM channels WHERE chat_key = ?",
                (chat_key,),
            ).fetchone()
        return Channel(id=int(row["id"]), provider=row["provider"], chat_key=row["chat_key"]) if row else None

    def import_directory(self, payload: dict[str, Any]) -> dict[str, int]:
        """Upsert categories, tags, groups and channels from a forum export.

        Expected shape::

            {"categories": [{"id": 1, "slug": "general"}],
             "tags": [{"id": 1, "name": "release"}],
             "groups": [{"id": 1, "name": "staff"}],
             "channels": [{"id": 1, "provider": "telegram", "chat_key": "@team"}]}

        Returns the number of records written per section.
        """

        counts = {"categories": 0, "tags": 0, "groups": 0, "channels": 0}
        with self._connect() as conn:
            for entry in payload.get("categories", []):
                conn.execute(
                    """
                    INSERT INTO categories (id, slug) VALUES (?, ?)
                    ON CONFLICT(id) DO UPDATE SET slug = excluded.slug
                    """,
                    (int(entry["id"]), entry["slug"]),
                )
                counts["categories"] += 1
            for entry in payload.get("tags", []):
                conn.execute(
                    """
                    INSERT INTO tags (id, name) VALUES (?, ?)
                    ON CONFLICT(id) DO UPDATE SET name = excluded.name
                    """,
                    (int(entry["id"]), entry["name"]),
                )
                counts["tags"] += 1
            for entry in payload.get("groups", []):
                conn.execute(
                    """
                    INSERT INTO forum_groups (id, name) VALUES (?, ?)
                    ON CONFLICT(id) DO UPDATE SET name = excluded.name
                    """,
                    (int(entry["id"]), entry["name"]),
                )
                counts["groups"] += 1
            for entry in payload.get("channels", []):
                conn.execute(
                    """
                    INSERT INTO channels (id, provider, chat_key) VALUES (?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        provider = excluded.provider,
                        chat_key = excluded.chat_key
                    """,
                    (int(entry["id"]), entry.get("provider", "telegram"), entry.get("chat_key")),
                )
                counts["channels"] += 1
        return counts
