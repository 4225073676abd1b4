#!/usr/bin/env python3
"""
Configuration Data Models Module

This module defines the configuration classes for StreamVerse: channel
sources, filters and the top level application settings.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# add our imports
from dataclasses import dataclass, field
from typing import List, Optional

"""
Configuration for a channel source

Defines where a source lives and how often it is refreshed.
"""
@dataclass
class SourceConfig:
    """Configuration for a channel source"""
    name: str
    type: str  # 'm3u' or 'xtream'
    url: str
    username: Optional[str] = None
    password: Optional[str] = None
    refresh_interval: int = 300  # seconds
    enabled: bool = True
    include_vod: bool = False

"""
Configuration for channel filtering

Defines regex patterns for including or excluding channels based on names and urls.
"""
@dataclass
class FilterConfig:
    """Configuration for channel filtering"""
    include_name_patterns: List[str] = field(default_factory=list)
    include_url_patterns: List[str] = field(default_factory=list)
    exclude_name_patterns: List[str] = field(default_factory=list)
    exclude_url_patterns: List[str] = field(default_factory=list)

"""
Configuration for channel reachability checks

Bounds how many checks run at once and how long a result stays fresh.
"""
@dataclass
class ValidationConfig:
    """Configuration for channel reachability checks"""
    max_concurrent: int = 5
    timeout: float = 10  # seconds
    cache_expiry: int = 300  # seconds

"""
Main application configuration

Top-level configuration containing all sources, filters, and global settings.
"""
@dataclass
class AppConfig:
    """Main application configuration"""
    sources: List[SourceConfig] = field(default_factory=list)
    filters: FilterConfig = field(default_factory=FilterConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    verified_channels: Optional[str] = None
    refresh_interval: int = 60
    bind_host: str = "0.0.0.0"
    bind_port: int = 8080
    log_level: str = "INFO"
