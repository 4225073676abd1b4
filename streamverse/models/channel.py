#!/usr/bin/env python3
"""
Channel Data Model Module

This module defines the normalized channel record shared by every source,
the catalog merger and the playback resolver.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# add our imports
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Mapping
from streamverse.exceptions import InvalidChannelRecord

# loose record keys accepted for each field, first match wins
_FIELD_ALIASES = {
    "id": ("id",),
    "name": ("name", "tvgName", "tvg_name"),
    "url": ("url",),
    "logo": ("logo", "tvgLogo", "tvg_logo"),
    "group": ("group", "category", "group_title"),
    "country": ("country", "tvgCountry"),
    "language": ("language", "tvgLanguage"),
}

"""
A single channel in the directory

The url is the playback locator: a stream url, a file url, or a
magnet/info-hash descriptor. An empty logo means "use fallback art".
"""
@dataclass(frozen=True)
class Channel:
    """Normalized channel record"""
    id: str
    name: str
    url: str
    logo: str = ""
    group: str = ""
    country: str = ""
    language: str = ""

    """
    Build a channel from a loose mapping
    Validates a record coming from JSON: missing fields default to an empty
    string, unknown keys are ignored, scalars are coerced to strings.

    @param data: Mapping Loose channel record
    @return Channel: The validated channel
    @throws InvalidChannelRecord: When the record has no id or no name
    """
    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Channel":

        # make sure we have a mapping at all
        if not isinstance(data, Mapping):
            raise InvalidChannelRecord(f"Expected an object, got {type(data).__name__}")

        # pull each field through its aliases
        values = {}
        for name, aliases in _FIELD_ALIASES.items():
            values[name] = ""
            for alias in aliases:
                raw = data.get(alias)
                if raw is None or isinstance(raw, (dict, list)):
                    continue
                text = str(raw).strip()
                if text:
                    values[name] = text
                    break

        # no id or no name means no channel
        if not values["id"]:
            raise InvalidChannelRecord("Channel record has no id")
        if not values["name"]:
            raise InvalidChannelRecord(f"Channel record '{values['id']}' has no name")

        # return the channel
        return cls(**values)

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    """
    Overlay another record onto this one
    Non-empty fields of the other record win, empty fields never clear a
    value that is already set.

    @param other: Channel Later record with the same id
    @return Channel: The merged record
    """
    def overlay(self, other: "Channel") -> "Channel":

        # hold the merged values
        merged = {}
        for f in fields(self):
            mine = getattr(self, f.name)
            theirs = getattr(other, f.name)
            merged[f.name] = theirs if theirs else mine

        # ids never change
        merged["id"] = self.id
        return Channel(**merged)
