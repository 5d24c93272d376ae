from dataclasses import replace

import pytest

from geoshapes import repository
from geoshapes.errors import InvalidParam, UnknownTable
from geoshapes.schemas import EntityKind


@pytest.mark.asyncio
async def test_points_never_hit_the_database(config, fake_db):
    rows = await repository.fetch_geometries(EntityKind.POINT, ["Q1"], None, {}, config=config)
    assert rows == []
    assert fake_db["calls"] == []


@pytest.mark.asyncio
async def test_no_ids_no_query(config, fake_db):
    assert await repository.fetch_geometries(EntityKind.SHAPE, [], None, {}, config=config) == []
    assert fake_db["calls"] == []


@pytest.mark.asyncio
async def test_shape_uses_polygon_table_and_default_template(config, fake_db):
    fake_db["rows"] = [{"id": "Q1", "data": '{"type": "Point", "coordinates": [0, 0]}'}]
    rows = await repository.fetch_geometries(EntityKind.SHAPE, ["Q1", "Q2"], None, {}, config=config)

    assert rows == fake_db["rows"]
    sql, args = fake_db["calls"][0]
    assert 'FROM "wikidata_relation_polygon"' in sql
    assert "{table}" not in sql
    assert args == (["Q1", "Q2"],)


@pytest.mark.asyncio
async def test_line_uses_line_table(config, fake_db):
    await repository.fetch_geometries(EntityKind.LINE, ["Q1"], "unknown-profile", {}, config=config)
    sql, args = fake_db["calls"][0]
    assert 'FROM "wikidata_relation_members"' in sql
    assert sql == config.queries["default"].sql.replace("{table}", '"wikidata_relation_members"')


@pytest.mark.asyncio
async def test_template_defaults(config, fake_db):
    await repository.fetch_geometries(EntityKind.SHAPE, ["Q1"], "simplifyarea", {}, config=config)
    _, args = fake_db["calls"][0]
    assert args == (["Q1"], 0.001, 1.0)


@pytest.mark.asyncio
async def test_numeric_overrides_are_accepted(config, fake_db):
    await repository.fetch_geometries(
        EntityKind.SHAPE, ["Q1"], "simplifyarea", {"arg1": "0.5", "arg2": "-3"}, config=config
    )
    _, args = fake_db["calls"][0]
    assert args == (["Q1"], 0.5, -3.0)


@pytest.mark.parametrize("value", ["1; DROP TABLE x", "abc", "1e5", "0.5.1", ".5", "1 "])
def test_non_numeric_overrides_are_rejected(config, value):
    template = config.queries["simplify"]
    with pytest.raises(InvalidParam, match="arg1"):
        repository.template_args(template, {"arg1": value})


def test_unnamed_params_always_use_default():
    from core.config import QueryParam, QueryTemplate

    template = QueryTemplate(sql="SELECT 1", params=(QueryParam(name=None, default=7),))
    assert repository.template_args(template, {"": "3"}) == [7]


def test_missing_table(config):
    with pytest.raises(UnknownTable):
        repository.table_for(EntityKind.LINE, replace(config, line_table=""))


def test_check_params_skips_points(config):
    repository.check_params(EntityKind.POINT, "simplify", {"arg1": "bad"}, config=config)
    with pytest.raises(InvalidParam):
        repository.check_params(EntityKind.SHAPE, "simplify", {"arg1": "bad"}, config=config)
