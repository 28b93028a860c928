"""
Shared Kernel Module
====================

This module contains shared infrastructure used across all bounded contexts
(Issues, Search and SLA).

Architecture Pattern: Modular Monolith
- Each module (issues, search, sla) is a bounded context
- Shared kernel contains only generic infrastructure

DO NOT add issue, search or SLA business logic to the shared kernel.
"""
