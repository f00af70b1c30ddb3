"""
Configuration file handling.
"""
import os
import logging
import collections.abc
from pathlib import Path
import yaml.parser
from .util import yaml_load

SYSTEM_CONFIG = "/etc/biorecords.yml"
ENV_CONFIG = "BIORECORDS_CONFIG"

# Adapted from
# https://stackoverflow.com/a/3233356
def update_tree(tree_orig, tree_new):
    """Recursively update one dict with another.

    Note that the original is modified in place."""
    for key, val in tree_new.items():
        if isinstance(val, collections.abc.Mapping):
            tree_orig[key] = update_tree(tree_orig.get(key, {}), val)
        else:
            tree_orig[key] = val
    return tree_orig

def layer_configs(paths):
    """Load configuration for each path given, merging all options.

    The later paths take priority.  Empty/None entries are ignored."""
    config = {}
    logger = logging.getLogger(__name__)
    for path in paths:
        if not path:
            continue
        if Path(path).exists():
            try:
                cfg = yaml_load(path)
                logger.info(
                    "Configuration loaded from %s", path)
            except yaml.parser.ParserError as exception:
                logger.critical(
                    "Configuration parse error while loading %s", path)
                raise exception
        else:
            logger.info("Configuration file not found at %s", path)
            cfg = {}
        update_tree(config, cfg)
    return config

def path_for_config():
    """Return the packaged default config file path."""
    return Path(__file__).parent / "data" / "config.yml"

def default_paths():
    """List the config paths layered at import time, lowest priority first."""
    return [path_for_config(), SYSTEM_CONFIG, os.environ.get(ENV_CONFIG)]
