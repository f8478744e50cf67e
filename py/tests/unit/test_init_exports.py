from __future__ import annotations

import pytest

import streampipe_py as streampipe


def test_init_exposes_lazy_exports_via_getattr() -> None:
    assert callable(streampipe.ShardCursor)
    assert callable(streampipe.select_shard)
    assert callable(streampipe.SinkDispatcher)
    assert callable(streampipe.Pipe)
    assert callable(streampipe.FixedDelayPacer)
    assert callable(streampipe.PipeConfig.from_env)
    assert callable(streampipe.get_streams_client)


def test_all_names_resolve() -> None:
    for name in streampipe.__all__:
        assert getattr(streampipe, name) is not None


def test_unknown_attribute_raises() -> None:
    with pytest.raises(AttributeError):
        streampipe.Table  # noqa: B018
