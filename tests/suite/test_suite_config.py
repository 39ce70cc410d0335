"""Tests for the suite configuration."""

import msgspec
import pytest

from crdt_bench.errors import ConfigurationError
from crdt_bench.suite import SuiteConfig


class TestSuiteConfig:
    """Validate SuiteConfig inputs."""

    def test_defaults(self):
        cfg = SuiteConfig.default()
        assert cfg.op_size == 128
        assert cfg.sync_iterations == 20
        assert cfg.sync_concurrent_docs == 5
        assert cfg.sync_concurrent_ops == 10

    @pytest.mark.parametrize("field", ["op_size", "sync_iterations", "sync_concurrent_docs", "sync_concurrent_ops"])
    @pytest.mark.parametrize("value", [0, -1])
    def test_non_positive_rejected(self, field, value):
        with pytest.raises(ConfigurationError, match=field):
            SuiteConfig(**{field: value})

    @pytest.mark.parametrize("value", [1.5, "10", True])
    def test_non_integer_rejected(self, value):
        with pytest.raises(ConfigurationError):
            SuiteConfig(op_size=value)

    def test_frozen(self):
        cfg = SuiteConfig.default()
        with pytest.raises(AttributeError):
            cfg.op_size = 5

    def test_with_overrides_skips_none(self):
        cfg = SuiteConfig.default().with_overrides(op_size=16, sync_iterations=None)
        assert cfg.op_size == 16
        assert cfg.sync_iterations == 20

    def test_with_overrides_does_not_mutate(self):
        base = SuiteConfig.default()
        base.with_overrides(op_size=16)
        assert base.op_size == 128

    def test_with_overrides_rejects_unknown_fields(self):
        with pytest.raises(ConfigurationError, match="Unknown"):
            SuiteConfig.default().with_overrides(batch=3)

    def test_with_overrides_validates(self):
        with pytest.raises(ConfigurationError):
            SuiteConfig.default().with_overrides(op_size=0)

    def test_placeholders(self):
        cfg = SuiteConfig(op_size=3, sync_iterations=4, sync_concurrent_docs=5, sync_concurrent_ops=6)
        assert cfg.placeholders() == {
            "OP_SIZE": 3,
            "SYNC_ITERATIONS": 4,
            "SYNC_CONCURRENT_DOCS": 5,
            "SYNC_CONCURRENT_OPS": 6,
        }

    def test_rebuilt_copy_is_revalidated(self):
        with pytest.raises(ConfigurationError):
            SuiteConfig(**{**msgspec.structs.asdict(SuiteConfig.default()), "op_size": -2})
