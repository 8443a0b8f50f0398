"""
Converter construction from named parameters and event-level conversion.

Two converters share the same parameter map:

    HandlerConverter  full de-excitation cascade (create_handler)
    FermiConverter    Fermi break-up only (create_fermi_converter)
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np
from tqdm import tqdm

from deexcitation_mc.config import HandlerConfig
from deexcitation_mc.core.fragment import Fragment
from deexcitation_mc.core.nuclear_data import NuclearData
from deexcitation_mc.core.particle import ParticleTable, ReactionProduct
from deexcitation_mc.exceptions import ConfigurationError
from deexcitation_mc.handler.conversion import ResultConverter
from deexcitation_mc.handler.excitation_handler import ExcitationHandler
from deexcitation_mc.physics.cache import LFUCache, SimpleCache
from deexcitation_mc.physics.fermi_breakup import DEFAULT_CACHE_SIZE, FermiBreakUp

logger = logging.getLogger(__name__)

Params = Union[Mapping[str, Any], HandlerConfig, None]


def make_cache(name: Optional[str], size: Optional[int] = None):
    """
    Build a Fermi break-up split cache.

    Parameters:
        name: "lfu", "simple", or None for the model default
        size: LFU capacity

    Returns:
        Cache instance, or None when name is None
    """
    if name is None:
        return None
    if name == 'simple':
        return SimpleCache()
    if name == 'lfu':
        return LFUCache(size if size is not None else DEFAULT_CACHE_SIZE)
    raise ConfigurationError('only "lfu" and "simple" caches are supported')


def _prepare(params: Params):
    """Parse parameters, apply an explicit log level and load nuclear data."""
    config = params if isinstance(params, HandlerConfig) else HandlerConfig.from_dict(params)

    if config.log_level is not None:
        logging.getLogger('deexcitation_mc').setLevel(config.log_level)

    return config, NuclearData(mass_file=config.nuclei_csv)


def create_handler(params: Params = None) -> ExcitationHandler:
    """
    Build a handler from a parameter map or configuration.

    Recognised keys: cache ("lfu" | "simple"), cache_size, nucleiCsv, seed,
    log_level. The package logger is only touched when log_level is given.

    Raises:
        ConfigurationError: Unsupported cache, unknown key or unreadable mass file
    """
    config, nuclear_data = _prepare(params)
    handler = ExcitationHandler(
        nuclear_data=nuclear_data,
        seed=config.seed,
        fermi_cache=make_cache(config.cache, config.cache_size),
    )
    logger.info("Created handler: cache=%s, nuclear masses=%s, seed=%s",
                config.cache or 'default', config.nuclei_csv or 'built-in', config.seed)
    return handler


def create_fermi_converter(params: Params = None) -> 'FermiConverter':
    """
    Build a Fermi break-up event converter from the same parameters as `create_handler`.

    Raises:
        ConfigurationError: Unsupported cache, unknown key or unreadable mass file
    """
    config, nuclear_data = _prepare(params)
    model = FermiBreakUp(nuclear_data, rng=np.random.default_rng(config.seed),
                         cache=make_cache(config.cache, config.cache_size))
    logger.info("Created Fermi break-up converter: cache=%s, nuclear masses=%s, seed=%s",
                config.cache or 'default', config.nuclei_csv or 'built-in', config.seed)
    return FermiConverter(model, ParticleTable(nuclear_data))


class EventConverter:
    """Base for converters that map an event of fragments to reaction products."""

    def __call__(self, event: Sequence[Fragment]) -> List[ReactionProduct]:
        raise NotImplementedError

    def run(self, events: Iterable[Sequence[Fragment]],
            verbose: bool = False) -> List[List[ReactionProduct]]:
        """
        Convert a batch of events sequentially.

        Parameters:
            events: Iterable of events
            verbose: Show a progress bar

        Returns:
            Products per event, in input order
        """
        return [self(event) for event in tqdm(events, desc=type(self).__name__,
                                               unit="event", disable=not verbose)]


class HandlerConverter(EventConverter):
    """
    Applies a handler to whole events.

    An event is a sequence of excited fragments; its products are the
    concatenated products of every fragment.

    Usage:
        converter = HandlerConverter(create_handler({"cache": "lfu"}))
        events = converter.run(event_list, verbose=True)
    """

    def __init__(self, handler: ExcitationHandler):
        self.handler = handler

    def __call__(self, event: Sequence[Fragment]) -> List[ReactionProduct]:
        products = []
        for fragment in event:
            products.extend(self.handler.break_it_up(fragment))
        return products


class FermiConverter(EventConverter):
    """
    Applies one Fermi break-up step to every fragment of an event.

    Fragments outside the Fermi region, or with no open partition, are
    converted unchanged. Break-up products are not de-excited further.

    Usage:
        converter = create_fermi_converter({"cache": "simple", "seed": 1})
        products = converter([Fragment.at_rest(12, 6, 50.0, nuclear_data)])
    """

    def __init__(self, model: FermiBreakUp, particle_table: ParticleTable):
        self.model = model
        self.converter = ResultConverter(particle_table)

    def __call__(self, event: Sequence[Fragment]) -> List[ReactionProduct]:
        results = []
        for fragment in event:
            current = fragment.copy()
            if self.model.is_applicable(current.Z, current.A, current.excitation_energy):
                results.extend(self.model.split(current))
            else:
                results.append(current)
        return self.converter.convert(results)
