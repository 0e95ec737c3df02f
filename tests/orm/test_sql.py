"""Tests for the SQL renderer, per dialect."""

from __future__ import annotations

from datetime import datetime

import pytest

from modelspine.core.dialect import get_dialect
from modelspine.core.errors import (
    InvalidFieldError,
    TypeMismatchError,
    UnsupportedOperationError,
)
from modelspine.orm import F, JoinType, kwargs
from modelspine.orm.sql import Operation, render, render_predicate
from tests._support.models import TAG, Event, Profile, User


@pytest.fixture
def sqlite():
    return get_dialect("sqlite")


@pytest.fixture
def pg():
    return get_dialect("postgresql")


@pytest.fixture
def mysql():
    return get_dialect("mysql")


@pytest.fixture
def turso():
    return get_dialect("turso")


class TestCreateTable:
    def test_sqlite(self, sqlite):
        assert render(sqlite, Operation.CREATE_TABLE, User).sql == (
            'CREATE TABLE IF NOT EXISTS "user" ("id" INTEGER PRIMARY KEY AUTOINCREMENT, '
            '"name" TEXT NOT NULL UNIQUE, "age" INTEGER NOT NULL, '
            "\"role\" TEXT NOT NULL DEFAULT 'user')"
        )

    def test_mysql_bounds_text(self, mysql):
        assert render(mysql, Operation.CREATE_TABLE, User).sql == (
            "CREATE TABLE IF NOT EXISTS `user` (`id` INTEGER PRIMARY KEY AUTO_INCREMENT, "
            "`name` VARCHAR(255) NOT NULL UNIQUE, `age` INTEGER NOT NULL, "
            "`role` VARCHAR(255) NOT NULL DEFAULT 'user')"
        )

    def test_foreign_key_constraint_comes_last(self, sqlite):
        assert render(sqlite, Operation.CREATE_TABLE, Profile).sql == (
            'CREATE TABLE IF NOT EXISTS "profile" ("id" INTEGER PRIMARY KEY AUTOINCREMENT, '
            '"user_id" INTEGER NOT NULL, "bio" TEXT, '
            'FOREIGN KEY ("user_id") REFERENCES "user" ("id"))'
        )

    def test_defaults_and_temporal_columns(self, sqlite, pg):
        assert render(sqlite, Operation.CREATE_TABLE, Event).sql == (
            'CREATE TABLE IF NOT EXISTS "event" ("id" INTEGER PRIMARY KEY AUTOINCREMENT, '
            '"title" VARCHAR(80) NOT NULL, "score" REAL NOT NULL DEFAULT 0.0, '
            '"active" INTEGER NOT NULL DEFAULT 1, "day" VARCHAR(10), '
            '"created" VARCHAR(40) NOT NULL)'
        )
        assert '"active" BOOLEAN NOT NULL DEFAULT TRUE' in render(
            pg, Operation.CREATE_TABLE, Event
        ).sql

    def test_hand_built_descriptor(self, pg):
        assert render(pg, Operation.CREATE_TABLE, TAG).sql == (
            'CREATE TABLE IF NOT EXISTS "tag" ("id" SERIAL PRIMARY KEY, "label" TEXT NOT NULL UNIQUE)'
        )


class TestSelect:
    def test_postgres_placeholders_in_order(self, pg):
        query = render(pg, Operation.SELECT, User, kwargs(name="Jane", age__lt=30))
        assert query.sql == (
            'SELECT "id", "name", "age", "role" FROM "user" '
            'WHERE (("name" = $1) AND ("age" < $2))'
        )
        assert query.params == ["Jane", 30]

    def test_without_predicate(self, mysql):
        assert render(mysql, Operation.SELECT, User).sql == (
            "SELECT `id`, `name`, `age`, `role` FROM `user`"
        )

    def test_limit(self, sqlite):
        query = render(sqlite, Operation.SELECT, User, kwargs(name="Jane"), limit=1)
        assert query.sql.endswith('WHERE ("name" = ?) LIMIT 1')

    def test_negative_limit(self, sqlite):
        with pytest.raises(TypeMismatchError):
            render(sqlite, Operation.SELECT, User, limit=-1)

    def test_or_is_parenthesised(self, turso):
        predicate = kwargs(age__lt=18) | (kwargs(age__gte=65) & kwargs(role="admin"))
        query = render(turso, Operation.SELECT, User, predicate)
        assert query.sql.endswith(
            'WHERE (("age" < :p1) OR (("age" >= :p2) AND ("role" = :p3)))'
        )
        assert query.params == [18, 65, "admin"]

    def test_null_comparisons(self, sqlite):
        assert render(sqlite, Operation.SELECT, Profile, kwargs(bio=None)).sql.endswith(
            'WHERE ("bio" IS NULL)'
        )
        query = render(sqlite, Operation.SELECT, Profile, kwargs(bio__ne=None))
        assert query.sql.endswith('WHERE ("bio" IS NOT NULL)')
        assert query.params == []
        with pytest.raises(TypeMismatchError):
            render(sqlite, Operation.SELECT, Profile, kwargs(bio__lt=None))

    def test_values_are_encoded(self, sqlite):
        query = render(
            sqlite,
            Operation.SELECT,
            Event,
            kwargs(active=True, created__gte=datetime(2024, 1, 1, 12, 0)),
        )
        assert query.params == [1, "2024-01-01 12:00:00"]

    def test_qualified_name_of_own_model(self, sqlite):
        query = render(sqlite, Operation.SELECT, User, User.age > 21)
        assert query.sql.endswith('WHERE ("age" > ?)')

    def test_unknown_field(self, sqlite):
        with pytest.raises(InvalidFieldError) as exc_info:
            render(sqlite, Operation.SELECT, User, kwargs(agee=3))
        assert exc_info.value.field == "agee"

    def test_unknown_qualifier(self, sqlite):
        with pytest.raises(InvalidFieldError):
            render(sqlite, Operation.SELECT, User, F("profile.bio") == "x")

    def test_type_mismatch(self, sqlite):
        with pytest.raises(TypeMismatchError):
            render(sqlite, Operation.SELECT, User, kwargs(age="old"))

    def test_values_never_reach_sql_text(self, sqlite):
        query = render(sqlite, Operation.SELECT, User, kwargs(name="x'; DROP TABLE user; --"))
        assert "DROP" not in query.sql
        assert query.params == ["x'; DROP TABLE user; --"]


class TestCount:
    def test_count(self, sqlite):
        query = render(sqlite, Operation.COUNT, User, kwargs(role="admin"))
        assert query.sql == 'SELECT COUNT(*) AS "count" FROM "user" WHERE ("role" = ?)'
        assert query.params == ["admin"]


class TestInsert:
    def test_sqlite(self, sqlite):
        query = render(
            sqlite, Operation.INSERT, User, values={"name": "Jane", "age": 28, "role": "user"}
        )
        assert query.sql == 'INSERT INTO "user" ("name", "age", "role") VALUES (?, ?, ?)'
        assert query.params == ["Jane", 28, "user"]

    def test_postgres_returns_key(self, pg):
        query = render(pg, Operation.INSERT, User, values={"name": "Jane", "age": 28})
        assert query.sql == (
            'INSERT INTO "user" ("name", "age") VALUES ($1, $2) RETURNING "id"'
        )

    def test_columns_follow_descriptor_order(self, sqlite):
        query = render(sqlite, Operation.INSERT, User, values={"age": 28, "name": "Jane"})
        assert query.params == ["Jane", 28]

    def test_empty_insert(self, sqlite, mysql, pg):
        assert render(sqlite, Operation.INSERT, User, values={}).sql == (
            'INSERT INTO "user" DEFAULT VALUES'
        )
        assert render(mysql, Operation.INSERT, User, values={}).sql == (
            "INSERT INTO `user` () VALUES ()"
        )
        assert render(pg, Operation.INSERT, User, values={}).sql == (
            'INSERT INTO "user" DEFAULT VALUES RETURNING "id"'
        )

    def test_unknown_column(self, sqlite):
        with pytest.raises(InvalidFieldError):
            render(sqlite, Operation.INSERT, User, values={"nickname": "J"})


class TestUpdate:
    def test_set_params_precede_where_params(self, pg):
        query = render(pg, Operation.UPDATE, User, kwargs(id=1), {"age": 29, "role": "admin"})
        assert query.sql == 'UPDATE "user" SET "age" = $1, "role" = $2 WHERE ("id" = $3)'
        assert query.params == [29, "admin", 1]

    def test_requires_predicate(self, sqlite):
        with pytest.raises(UnsupportedOperationError):
            render(sqlite, Operation.UPDATE, User, None, {"age": 1})

    def test_requires_values(self, sqlite):
        with pytest.raises(UnsupportedOperationError):
            render(sqlite, Operation.UPDATE, User, kwargs(id=1), {})


class TestDelete:
    def test_mysql(self, mysql):
        query = render(mysql, Operation.DELETE, User, kwargs(id=4))
        assert query.sql == "DELETE FROM `user` WHERE (`id` = %s)"
        assert query.params == [4]

    def test_requires_predicate(self, sqlite):
        with pytest.raises(UnsupportedOperationError):
            render(sqlite, Operation.DELETE, User)


class TestJoinSelect:
    def test_inner_join(self, sqlite):
        query = render(
            sqlite,
            Operation.INNER_JOIN_SELECT,
            User,
            User.id == Profile.user_id,
            right=Profile,
            where=User.age < 30,
        )
        assert query.sql == (
            'SELECT "user"."id" AS "user.id", "user"."name" AS "user.name", '
            '"user"."age" AS "user.age", "user"."role" AS "user.role", '
            '"profile"."id" AS "profile.id", "profile"."user_id" AS "profile.user_id", '
            '"profile"."bio" AS "profile.bio" '
            'FROM "user" INNER JOIN "profile" ON ("user"."id" = "profile"."user_id") '
            'WHERE ("user"."age" < ?)'
        )
        assert query.params == [30]

    def test_unqualified_unique_column_resolves(self, pg):
        query = render(
            pg,
            Operation.INNER_JOIN_SELECT,
            User,
            F("user.id") == F("user_id"),
            right=Profile,
            where=kwargs(bio="hi"),
        )
        assert 'ON ("user"."id" = "profile"."user_id")' in query.sql
        assert query.sql.endswith('WHERE ("profile"."bio" = $1)')

    def test_ambiguous_column(self, sqlite):
        with pytest.raises(InvalidFieldError, match="ambiguous"):
            render(
                sqlite,
                Operation.INNER_JOIN_SELECT,
                User,
                User.id == Profile.user_id,
                right=Profile,
                where=kwargs(id=1),
            )

    @pytest.mark.parametrize(
        "join_type, keyword",
        [
            (JoinType.LEFT, "LEFT OUTER JOIN"),
            (JoinType.RIGHT, "RIGHT OUTER JOIN"),
            (JoinType.FULL, "FULL OUTER JOIN"),
        ],
    )
    def test_outer_joins(self, pg, join_type, keyword):
        query = render(
            pg,
            Operation.INNER_JOIN_SELECT,
            User,
            User.id == Profile.user_id,
            right=Profile,
            join_type=join_type,
        )
        assert f'FROM "user" {keyword} "profile"' in query.sql

    def test_mysql_has_no_full_join(self, mysql):
        with pytest.raises(UnsupportedOperationError):
            render(
                mysql,
                Operation.INNER_JOIN_SELECT,
                User,
                User.id == Profile.user_id,
                right=Profile,
                join_type=JoinType.FULL,
            )

    def test_requires_right_model(self, sqlite):
        with pytest.raises(InvalidFieldError):
            render(sqlite, Operation.INNER_JOIN_SELECT, User, User.id == Profile.user_id)


class TestAddColumn:
    def test_postgres(self, pg):
        query = render(pg, Operation.ADD_COLUMN, User, field_name="name")
        assert query.sql == 'ALTER TABLE "user" ADD COLUMN "name" TEXT NOT NULL UNIQUE'

    def test_sqlite_restrictions(self, sqlite):
        with pytest.raises(UnsupportedOperationError):
            render(sqlite, Operation.ADD_COLUMN, User, field_name="name")
        with pytest.raises(UnsupportedOperationError):
            render(sqlite, Operation.ADD_COLUMN, User, field_name="id")

    def test_unknown_column(self, pg):
        with pytest.raises(InvalidFieldError):
            render(pg, Operation.ADD_COLUMN, User, field_name="nickname")


class TestRenderPredicate:
    def test_standalone(self, pg):
        query = render_predicate(pg, kwargs(age__gte=18, role="admin"), User.__descriptor__)
        assert query.sql == '(("age" >= $1) AND ("role" = $2))'
        assert query.params == [18, "admin"]
