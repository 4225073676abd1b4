#!/usr/bin/env python3
"""
Configuration Loader Module

This module handles loading and parsing of YAML configuration files
for StreamVerse. It converts raw YAML data into structured configuration
objects.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# setup the imports
import yaml
from pathlib import Path
from streamverse.models import AppConfig, SourceConfig, FilterConfig, ValidationConfig

"""
Load and parse configuration from YAML file

Reads the specified YAML configuration file, validates its existence,
and converts the data into structured configuration objects for use
throughout the application.

@param config_path: str Path to the YAML configuration file
@return AppConfig: Fully populated application configuration object
@throws FileNotFoundError: When the specified config file does not exist
"""
def load_config(config_path: str) -> AppConfig:

    # load the config file
    config_file = Path(config_path)

    # make sure it actually exists
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    # now open it grab the data as yaml
    with open(config_file, 'r') as f:
        config_data = yaml.safe_load(f) or {}

    # setup and hold the sources
    sources = []
    for source_data in config_data.get('sources') or []:
        sources.append(SourceConfig(
            name=source_data['name'],
            type=source_data.get('type', 'm3u'),
            url=source_data['url'],
            username=source_data.get('username'),
            password=source_data.get('password'),
            refresh_interval=source_data.get('refresh_interval', 300),
            enabled=source_data.get('enabled', True),
            include_vod=source_data.get('include_vod', False)
        ))

    # setup and hold the filters
    filter_data = config_data.get('filters') or {}
    filters = FilterConfig(
        include_name_patterns=filter_data.get('include_name_patterns', []),
        include_url_patterns=filter_data.get('include_url_patterns', []),
        exclude_name_patterns=filter_data.get('exclude_name_patterns', []),
        exclude_url_patterns=filter_data.get('exclude_url_patterns', [])
    )

    # setup the channel checks
    validation_data = config_data.get('validation') or {}
    validation = ValidationConfig(
        max_concurrent=validation_data.get('max_concurrent', 5),
        timeout=validation_data.get('timeout', 10),
        cache_expiry=validation_data.get('cache_expiry', 300)
    )

    # return the applications configuration with defaults if necessary
    return AppConfig(
        sources=sources,
        filters=filters,
        validation=validation,
        verified_channels=config_data.get('verified_channels'),
        refresh_interval=config_data.get('refresh_interval', 60),
        bind_host=config_data.get('bind_host', '0.0.0.0'),
        bind_port=config_data.get('bind_port', 8080),
        log_level=config_data.get('log_level', 'INFO')
    )
