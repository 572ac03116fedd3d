"""Routing — compiled route table with first-match dispatch.

Routes are discovered from registered components when the router is
built and are read-only afterwards.
"""
