"""
Core business logic for the coaching dashboard.

This module is framework-agnostic - it doesn't import FastAPI, Snowflake,
or any infrastructure concerns. The scheduling algorithms take plain
collections in and hand new collections back, so they can be tested
without a database or a web server.
"""
