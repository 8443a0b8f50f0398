"""
Tests for handler configuration, the factory and event conversion.
"""

import logging

import pytest

from deexcitation_mc.config import HandlerConfig
from deexcitation_mc.core.fragment import Fragment
from deexcitation_mc.exceptions import ConfigurationError
from deexcitation_mc.handler.factory import (
    FermiConverter,
    HandlerConverter,
    create_fermi_converter,
    create_handler,
    make_cache,
)
from deexcitation_mc.logging_config import setup_logging
from deexcitation_mc.physics.cache import LFUCache, SimpleCache


@pytest.fixture
def package_logger():
    """Package logger, restored to its previous level and handlers afterwards."""
    logger = logging.getLogger("deexcitation_mc")
    level, handlers = logger.level, list(logger.handlers)
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


class TestHandlerConfig:
    def test_defaults(self):
        config = HandlerConfig()
        assert config.cache is None
        assert config.cache_size == 180
        assert config.nuclei_csv is None
        assert config.log_level is None

    def test_from_dict_with_aliases(self, tmp_path):
        path = tmp_path / "masses.csv"
        path.write_text("12,6,11174.86\n")
        config = HandlerConfig.from_dict({"cache": "simple", "nucleiCsv": str(path),
                                          "cacheSize": "50", "seed": "3"})
        assert config.cache == "simple"
        assert config.nuclei_csv == str(path)
        assert config.cache_size == 50
        assert config.seed == 3

    def test_unsupported_cache(self):
        with pytest.raises(ConfigurationError, match='only "lfu" and "simple" caches are supported'):
            HandlerConfig.from_dict({"cache": "lru"})

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError):
            HandlerConfig.from_dict({"cachee": "lfu"})

    def test_bad_values(self):
        with pytest.raises(ConfigurationError):
            HandlerConfig.from_dict({"cache_size": "many"})
        with pytest.raises(ConfigurationError):
            HandlerConfig.from_dict({"cache_size": 0})
        with pytest.raises(ConfigurationError):
            HandlerConfig.from_dict({"log_level": "LOUD"})

    def test_missing_mass_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            HandlerConfig.from_dict({"nucleiCsv": str(tmp_path / "missing.csv")})

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            HandlerConfig(cache="fifo")

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "handler.yaml"
        path.write_text("cache: lfu\ncache_size: 25\nseed: 11\nlog_level: debug\n")
        config = HandlerConfig.from_yaml(path)
        assert (config.cache, config.cache_size, config.seed) == ("lfu", 25, 11)
        assert config.log_level == "DEBUG"

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "handler.yaml"
        path.write_text("")
        assert HandlerConfig.from_yaml(path) == HandlerConfig()

    def test_yaml_must_be_mapping(self, tmp_path):
        path = tmp_path / "handler.yaml"
        path.write_text("- lfu\n- simple\n")
        with pytest.raises(ConfigurationError):
            HandlerConfig.from_yaml(path)


class TestFactory:
    def test_make_cache(self):
        assert make_cache(None) is None
        assert isinstance(make_cache("simple"), SimpleCache)
        lfu = make_cache("lfu")
        assert isinstance(lfu, LFUCache)
        assert lfu.capacity == 19 * 19 // 2
        with pytest.raises(ConfigurationError):
            make_cache("lru")

    def test_create_handler_with_lfu(self):
        handler = create_handler({"cache": "lfu", "seed": 1})
        assert isinstance(handler.fermi_break_up_model.cache, LFUCache)

    def test_create_handler_with_simple(self):
        handler = create_handler({"cache": "simple"})
        assert isinstance(handler.fermi_break_up_model.cache, SimpleCache)

    def test_create_handler_rejects_unknown_cache(self):
        with pytest.raises(ConfigurationError, match="caches are supported"):
            create_handler({"cache": "random"})

    def test_create_handler_with_mass_table(self, tmp_path):
        path = tmp_path / "masses.csv"
        path.write_text("A,Z,mass\n12,6,11175.5\n")
        handler = create_handler({"nucleiCsv": str(path)})
        assert handler.nuclear_data.nuclear_mass(6, 12) == 11175.5
        assert handler.particle_table.get_ion(6, 12).pdg_mass == 11175.5

    def test_create_handler_from_config(self):
        handler = create_handler(HandlerConfig(seed=5))
        assert isinstance(handler.fermi_break_up_model.cache, LFUCache)

    def test_create_handler_keeps_logging_setup(self, package_logger):
        setup_logging(logging.INFO)
        create_handler({"cache": "lfu", "seed": 1})
        assert package_logger.level == logging.INFO

    def test_create_handler_applies_explicit_log_level(self, package_logger):
        setup_logging(logging.INFO)
        create_handler({"seed": 1, "logLevel": "error"})
        assert package_logger.level == logging.ERROR


class TestHandlerConverter:
    def test_event_products_concatenate(self):
        handler = create_handler({"seed": 2})
        converter = HandlerConverter(handler)
        data = handler.nuclear_data
        event = [Fragment.at_rest(12, 6, 40.0, data), Fragment.at_rest(16, 8, 0.0, data)]
        products = converter(event)
        assert sum(p.atomic_mass for p in products) == 28
        assert products[-1].definition.name == 'O16'

    def test_run(self):
        handler = create_handler({"seed": 4})
        data = handler.nuclear_data
        events = [[Fragment.at_rest(12, 6, 30.0, data)] for _ in range(5)] + [[]]
        results = HandlerConverter(handler).run(events)
        assert len(results) == 6
        assert all(sum(p.atomic_mass for p in products) == 12 for products in results[:5])
        assert results[-1] == []


class TestFermiConverter:
    def test_light_nucleus_breaks_up(self):
        converter = create_fermi_converter({"cache": "simple", "seed": 3})
        assert isinstance(converter, FermiConverter)
        assert isinstance(converter.model.cache, SimpleCache)

        data = converter.model.nuclear_data
        fragment = Fragment.at_rest(12, 6, 50.0, data)
        products = converter([fragment])
        assert len(products) >= 2
        assert sum(p.atomic_mass for p in products) == 12
        assert sum(p.atomic_number for p in products) == 6
        assert sum(p.total_energy for p in products) == pytest.approx(fragment.total_energy)
        assert fragment.excitation_energy == pytest.approx(50.0)

    def test_heavy_nucleus_passes_through(self):
        converter = create_fermi_converter({"seed": 3})
        data = converter.model.nuclear_data
        products = converter([Fragment.at_rest(56, 26, 0.0, data),
                              Fragment.at_rest(4, 2, 0.0, data)])
        assert [p.definition.name for p in products][0] == 'Fe56'
        assert sum(p.atomic_mass for p in products) == 60

    def test_run(self):
        converter = create_fermi_converter({"cache": "lfu", "seed": 5})
        data = converter.model.nuclear_data
        events = [[Fragment.at_rest(10, 5, 30.0, data)] for _ in range(4)]
        results = converter.run(events)
        assert len(results) == 4
        assert all(sum(p.atomic_mass for p in products) == 10 for products in results)

    def test_rejects_unknown_cache(self):
        with pytest.raises(ConfigurationError):
            create_fermi_converter({"cache": "fifo"})
