"""Kernel counter sampling and a cached JSON API for router dashboards."""
