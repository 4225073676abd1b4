#!/usr/bin/env python3
"""
API Routes Package Initialization

This package contains the API route definitions for StreamVerse.
It exports the router instance for inclusion in the FastAPI application.

@package StreamVerse
@author Kevin Pirnie <me@kpirnie.com>
@copyright Copyright (c) 2025
"""
from .routes import router

# hold the necessary modules
__all__ = ["router"]
