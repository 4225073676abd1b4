#!/usr/bin/env python3
"""
API Routes Module

This module defines the read-only REST API endpoints for StreamVerse.
It exposes the merged channel directory, its categories, the verified
marks, the alternative-channel lookup and on-demand channel checks.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""

# imports
import logging
from fastapi import APIRouter, HTTPException, Request, Query
from typing import Optional
from streamverse import __version__
from streamverse.models import Channel, ChannelHealth
from streamverse.services import by_category, search

# setup the logger
logger = logging.getLogger(__name__)

# setup the api router
router = APIRouter()

"""
Get StreamVerse instance from application state

@param request: Request FastAPI request object
@return StreamVerse: Instance from app state
@throws HTTPException: 503 if service not initialized
"""
def get_streamverse(request: Request):
    streamverse = getattr(request.app.state, 'streamverse', None)
    if not streamverse:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return streamverse

def channel_payload(streamverse, channel: Channel) -> dict:
    payload = channel.to_dict()
    payload['verified'] = streamverse.directory.is_verified(channel.id)
    payload['transport'] = streamverse.resolver.classify(channel).value

    # last known health, unknown until checked
    validator = streamverse.validator
    status = validator.get_status(channel.id) if validator is not None else None
    payload['health'] = status.health.value if status is not None else ChannelHealth.UNKNOWN.value
    payload['reliability'] = status.reliability if status is not None else None
    return payload

"""
Root endpoint with API information

@return dict: API info
"""
@router.get("/")
async def root():
    return {
        "message": "StreamVerse channel directory API",
        "version": __version__,
        "endpoints": {
            "status": "/status",
            "channels": "/channels",
            "channel": "/channels/{channel_id}",
            "alternatives": "/channels/{channel_id}/alternatives",
            "validate": "/channels/{channel_id}/validate",
            "categories": "/categories",
            "verified": "/verified",
            "refresh": "/refresh"
        }
    }

"""
Get service status information

Returns directory size and per-source refresh details.

@param request: Request FastAPI request object
@return dict: Service status information
"""
@router.get("/status")
async def get_status(request: Request):
    streamverse = get_streamverse(request)

    source_status = {}
    for name, source in streamverse.sources.items():
        source_status[name] = {
            "type": source.config.type,
            "enabled": source.config.enabled,
            "channels": len(source.channels),
            "last_refresh": source.last_refresh.isoformat() if source.last_refresh else None,
            "last_error": source.last_error
        }

    return {
        "status": "running",
        "total_channels": len(streamverse.directory),
        "verified_channels": len(streamverse.directory.verified_ids()),
        "sources": source_status,
        "validation": streamverse.validator.stats() if streamverse.validator is not None else None
    }

"""
List the directory

Optional text search and group filter, both case-insensitive.

@param request: Request FastAPI request object
@param q: str Search text
@param group: str Group label, "Undefined" for channels without one
@return dict: Channels
"""
@router.get("/channels")
async def get_channels(
    request: Request,
    q: Optional[str] = Query(None),
    group: Optional[str] = Query(None)
):
    streamverse = get_streamverse(request)

    # search first, then narrow to the group
    channels = search(streamverse.directory, q or "")
    if group:
        wanted = group.lower()
        groups = by_category(channels)
        channels = next((members for label, members in groups.items() if label.lower() == wanted), [])

    return {
        "total": len(channels),
        "channels": [channel_payload(streamverse, c) for c in channels]
    }

"""
Get one channel

@param channel_id: str Channel id
@param request: Request FastAPI request object
@return dict: The channel
@throws HTTPException: 404 if the channel is unknown
"""
@router.get("/channels/{channel_id}")
async def get_channel(channel_id: str, request: Request):
    streamverse = get_streamverse(request)

    channel = streamverse.directory.get(channel_id)
    if channel is None:
        raise HTTPException(status_code=404, detail=f"Channel '{channel_id}' not found")
    return channel_payload(streamverse, channel)

"""
Get alternatives for a channel

Used by players after a failed selection.

@param channel_id: str Channel id
@param request: Request FastAPI request object
@param limit: int Maximum number of alternatives
@return dict: Alternative channels
@throws HTTPException: 404 if the channel is unknown
"""
@router.get("/channels/{channel_id}/alternatives")
async def get_alternatives(channel_id: str, request: Request, limit: int = Query(5, ge=1, le=50)):
    streamverse = get_streamverse(request)

    channel = streamverse.directory.get(channel_id)
    if channel is None:
        raise HTTPException(status_code=404, detail=f"Channel '{channel_id}' not found")

    return {
        "channel": channel.id,
        "alternatives": [channel_payload(streamverse, c) for c in streamverse.alternatives_for(channel, limit)]
    }

"""
Check whether a channel answers

The outcome also updates the channel's cached health and reliability.

@param channel_id: str Channel id
@param request: Request FastAPI request object
@return dict: The check result and the channel's status
@throws HTTPException: 404 if the channel is unknown
"""
@router.post("/channels/{channel_id}/validate")
async def validate_channel(channel_id: str, request: Request):
    streamverse = get_streamverse(request)

    channel = streamverse.directory.get(channel_id)
    if channel is None:
        raise HTTPException(status_code=404, detail=f"Channel '{channel_id}' not found")

    result = await streamverse.validate_channel(channel)
    status = streamverse.validator.get_status(channel.id)
    return {
        "channel": channel.id,
        "working": result.is_working,
        "responseTime": round(result.response_time, 1),
        "error": result.error,
        "status": status.to_dict() if status is not None else None
    }

"""
List the categories with their channel counts

@param request: Request FastAPI request object
@return dict: Categories
"""
@router.get("/categories")
async def get_categories(request: Request):
    streamverse = get_streamverse(request)

    groups = by_category(streamverse.directory)
    return {
        "categories": [{"name": name, "count": len(members)} for name, members in groups.items()]
    }

"""
List the verified channels

@param request: Request FastAPI request object
@return dict: Verified channels and the override list metadata
"""
@router.get("/verified")
async def get_verified(request: Request):
    streamverse = get_streamverse(request)

    directory = streamverse.directory
    channels = [c for c in directory if directory.is_verified(c.id)]
    verified = streamverse.verified
    return {
        "version": verified.version if verified else "",
        "lastUpdated": verified.last_updated if verified else "",
        "channels": [c.to_dict() for c in channels]
    }

"""
Force a refresh of every source

@param request: Request FastAPI request object
@return dict: Directory size after the refresh
"""
@router.post("/refresh")
async def refresh(request: Request):
    streamverse = get_streamverse(request)

    directory = await streamverse.refresh_all_sources(force=True)
    logger.info(f"Manual refresh: {len(directory)} channels")
    return {"total_channels": len(directory)}
