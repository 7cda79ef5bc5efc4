"""
Core module for shared domain infrastructure.

This module contains:
- Domain exceptions and value objects
- Per-key lock arena
- Middleware, metrics and instrumentation
- Health views and periodic tasks
"""
